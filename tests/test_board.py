"""Tests for the board state machine and the terminal loop."""

from datetime import datetime

import pytest

from weekboard.board import (
    BoardApp,
    BoardState,
    Mode,
    keys_from_line,
    render_columns,
    render_header,
)
from weekboard.schemas import TaskCreate, TaskOut
from weekboard import store as task_store
from weekboard.theme import Theme


def _task(tid, status, project="Work", duration=None):
    when = datetime(2026, 2, 9, 9)
    return TaskOut(
        id=tid, title=f"task {tid}", status=status, project_id=1 if project == "Work" else 2,
        project_name=project, project_color="#6366f1", week_id="2026-W07",
        duration_minutes=duration, created_at=when, updated_at=when,
    )


@pytest.fixture
def board():
    return {
        "todo": [_task(1, "todo"), _task(2, "todo", project="Home"), _task(3, "todo")],
        "in-progress": [_task(4, "in-progress")],
        "done": [],
        "archived": [],
    }


PROJECTS = ["Work", "Home"]


def test_row_and_column_navigation_clamps(board):
    s = BoardState()
    s.handle_key("j", board, PROJECTS)
    s.handle_key("j", board, PROJECTS)
    s.handle_key("j", board, PROJECTS)
    assert s.selected_row == 2
    s.handle_key("l", board, PROJECTS)
    assert (s.active_column, s.selected_row) == (1, 0)
    s.handle_key("l", board, PROJECTS)
    s.handle_key("l", board, PROJECTS)
    s.handle_key("l", board, PROJECTS)
    assert s.active_column == 3
    s.handle_key("k", board, PROJECTS)
    assert s.selected_row == 0


def test_enter_advances_and_b_moves_back(board):
    s = BoardState()
    s.handle_key("j", board, PROJECTS)
    action = s.handle_key("enter", board, PROJECTS)
    assert (action.kind, action.task_id, action.status) == ("move", 2, "in-progress")
    assert s.selected_row == 0

    s.active_column = 1
    action = s.handle_key("b", board, PROJECTS)
    assert (action.kind, action.task_id, action.status) == ("move", 4, "todo")

    s.active_column = 0
    assert s.handle_key("b", board, PROJECTS) is None


def test_enter_on_last_column_does_nothing():
    s = BoardState()
    s.active_column = 3
    tasks = {"todo": [], "in-progress": [], "done": [], "archived": [_task(9, "archived")]}
    assert s.handle_key("enter", tasks, PROJECTS) is None


def test_delete_requires_confirmation(board):
    s = BoardState()
    assert s.handle_key("d", board, PROJECTS) is None
    assert s.mode == Mode.CONFIRM_DELETE
    assert s.handle_key("n", board, PROJECTS) is None
    assert s.mode == Mode.NAVIGATE

    s.handle_key("d", board, PROJECTS)
    action = s.handle_key("y", board, PROJECTS)
    assert (action.kind, action.task_id) == ("delete", 1)
    assert s.mode == Mode.NAVIGATE


def test_summary_and_detail_modes(board):
    s = BoardState()
    s.handle_key("s", board, PROJECTS)
    assert s.mode == Mode.SUMMARY
    s.handle_key("escape", board, PROJECTS)
    assert s.mode == Mode.NAVIGATE

    s.handle_key("o", board, PROJECTS)
    assert (s.mode, s.detail_task_id) == (Mode.DETAIL, 1)
    s.handle_key("enter", board, PROJECTS)
    assert s.mode == Mode.NAVIGATE and s.detail_task_id is None

    s.handle_key("s", board, PROJECTS)
    assert s.handle_key("q", board, PROJECTS).kind == "quit"


def test_project_filter_cycles_back_to_all(board):
    s = BoardState()
    s.handle_key("p", board, PROJECTS)
    assert s.active_filter == "Work"
    assert [t.id for t in s.filter_tasks(board)["todo"]] == [1, 3]
    s.handle_key("p", board, PROJECTS)
    assert s.active_filter == "Home"
    assert s.selected_task(board).id == 2
    s.handle_key("p", board, PROJECTS)
    assert s.active_filter is None


def test_filter_ignored_without_projects(board):
    s = BoardState()
    s.handle_key("p", board, [])
    assert s.active_filter is None


def test_input_mode(board):
    s = BoardState()
    s.handle_key("n", board, PROJECTS)
    assert s.mode == Mode.INPUT
    action = s.submit_input("Work::Write docs::1h")
    assert (action.kind, action.text) == ("create", "Work::Write docs::1h")
    assert s.mode == Mode.NAVIGATE

    s.handle_key("n", board, PROJECTS)
    assert s.submit_input("") is None
    assert s.mode == Mode.NAVIGATE


def test_keys_from_line():
    assert keys_from_line("") == ["enter"]
    assert keys_from_line("esc") == ["escape"]
    assert keys_from_line("jj") == ["j", "j"]
    assert keys_from_line(" left ") == ["left"]


def test_render_columns_plain(board):
    s = BoardState()
    lines = render_columns(s.filter_tasks(board), s, Theme(enabled=False), 120)
    assert "TO DO" in lines[0] and "ARCHIVED" in lines[0]
    assert "> [Work] task 1" in lines[2]
    assert "(empty)" in lines[2]


def test_render_header_counts():
    tasks = [_task(1, "todo", duration=30), _task(2, "done", duration=90), _task(3, "in-progress")]
    header = render_header("2026-W07", tasks, Theme(enabled=False), "Work")
    assert "2026-W07" in header
    assert "1/1/1 of 3" in header
    assert "1.5h/2h" in header
    assert "Filter: Work" in header


def test_board_app_session(store):
    with store.session() as db:
        task_store.create_task(db, TaskCreate(project="Work", title="stale"), "2026-W05")

    script = iter(["n", "Home::Fix sink::Desc::50k", "", "d", "y", "q"])
    out = []
    app = BoardApp(store, Theme(enabled=False), week_id="2026-W07", alt_screen=False,
                   read_line=lambda _prompt: next(script), write=out.append)
    app.run()

    with store.session() as db:
        tasks = task_store.get_tasks_by_week(db, "2026-W07")
    # stale rolled over then advanced; "Fix sink" created then deleted
    by_title = {t.title: t for t in tasks}
    assert "stale" in by_title
    assert by_title["stale"].status == "in-progress"
    assert "Fix sink" not in by_title
    assert out[-1] == "Goodbye."
    assert any("Rolled over 1" in chunk for chunk in out)
    assert any("50k" in chunk for chunk in out)


def test_plain_title_asks_for_project():
    s = BoardState()
    s.mode = Mode.INPUT
    assert s.submit_input("Fix the bug", PROJECTS) is None
    assert s.mode == Mode.INPUT and s.pending_title == "Fix the bug"
    assert "1) Work" in s.message and "2) Home" in s.message

    action = s.submit_input("Garden", PROJECTS)
    assert (action.kind, action.text) == ("create", "Garden::Fix the bug")
    assert s.mode == Mode.NAVIGATE and s.pending_title is None


def test_project_step_accepts_number_and_esc_goes_back():
    s = BoardState()
    s.mode = Mode.INPUT
    s.submit_input("Fix the bug", PROJECTS)
    assert s.submit_input("esc", PROJECTS) is None
    assert s.mode == Mode.INPUT and s.pending_title is None

    s.submit_input("Water plants", PROJECTS)
    assert s.submit_input("", PROJECTS) is None
    assert s.pending_title == "Water plants"
    action = s.submit_input("2", PROJECTS)
    assert action.text == "Home::Water plants"


def test_board_app_creates_plain_title(store):
    script = iter(["n", "Call the bank", "Errands", "q"])
    app = BoardApp(store, Theme(enabled=False), week_id="2026-W07", alt_screen=False,
                   read_line=lambda _prompt: next(script), write=lambda _s: None)
    app.run()

    with store.session() as db:
        tasks = task_store.get_tasks_by_week(db, "2026-W07")
    assert [(t.project_name, t.title) for t in tasks] == [("Errands", "Call the bank")]


def test_summary_keeps_store_order_within_a_day(store, add_task):
    first = add_task("AAA-first", "2026-W07", status="done", position=0)
    add_task("BBB-second", "2026-W07", status="todo", position=1)
    app = BoardApp(store, Theme(enabled=False), week_id="2026-W07", alt_screen=False)
    app.state.mode = Mode.SUMMARY

    week_tasks, tasks_by_status, _ = app._load()
    assert [t.id for t in week_tasks][0] == first
    text = "\n".join(app.render(week_tasks, tasks_by_status))
    assert text.index("AAA-first") < text.index("BBB-second")
