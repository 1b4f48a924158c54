"""Interactive weekly board.

``BoardState`` is the input-mode state machine (navigate / input / summary /
detail / confirm_delete). It never touches the database: key handlers return
an ``Action`` and ``BoardApp`` carries it out against the store, then
re-renders. Input is line based; in navigate mode every character of a line is
a key, an empty line is Enter and "esc" is Escape.
"""
import logging
import re
import shutil
import textwrap
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Mapping

from .deps import Store
from .exceptions import WeekboardError
from .schemas import TaskOut
from . import store as task_store
from .services.parser import is_shorthand
from .services.rollover import rollover_tasks
from .services.summary import STATUS_LABELS, render_summary_view
from .services.week import format_duration, get_week_id
from .theme import Theme

logger = logging.getLogger(__name__)

COLUMNS: list[tuple[str, str]] = [
    ("todo", "TO DO"),
    ("in-progress", "IN PROGRESS"),
    ("done", "DONE"),
    ("archived", "ARCHIVED"),
]
MIN_COL_WIDTH = 18
SEP = " | "
ANSI_RE = re.compile(r"\x1b\[[0-9;]*m")

TasksByStatus = Mapping[str, list[TaskOut]]


class Mode(str, Enum):
    NAVIGATE = "navigate"
    INPUT = "input"
    SUMMARY = "summary"
    DETAIL = "detail"
    CONFIRM_DELETE = "confirm_delete"


@dataclass
class Action:
    kind: str                       # "move" | "delete" | "create" | "refresh" | "quit"
    task_id: int | None = None
    status: str | None = None
    text: str | None = None


class BoardState:
    def __init__(self) -> None:
        self.mode: Mode = Mode.NAVIGATE
        self.active_column: int = 0
        self.selected_row: int = 0
        self.detail_task_id: int | None = None
        self.pending_delete_id: int | None = None
        self.active_filter: str | None = None
        self.pending_title: str | None = None
        self.message: str = ""

    # -------------------- queries --------------------
    def filter_tasks(self, tasks_by_status: TasksByStatus) -> dict[str, list[TaskOut]]:
        if not self.active_filter:
            return {key: list(tasks_by_status.get(key, [])) for key, _ in COLUMNS}
        return {
            key: [t for t in tasks_by_status.get(key, []) if t.project_name == self.active_filter]
            for key, _ in COLUMNS
        }

    @property
    def column_key(self) -> str:
        return COLUMNS[self.active_column][0]

    def selected_task(self, tasks_by_status: TasksByStatus) -> TaskOut | None:
        col = self.filter_tasks(tasks_by_status)[self.column_key]
        if 0 <= self.selected_row < len(col):
            return col[self.selected_row]
        return None

    def _clamp_row(self, tasks_by_status: TasksByStatus, column: int) -> int:
        col = self.filter_tasks(tasks_by_status)[COLUMNS[column][0]]
        return max(0, min(self.selected_row, len(col) - 1))

    # -------------------- transitions --------------------
    def cycle_filter(self, project_names: list[str]) -> None:
        """None -> first project -> ... -> last project -> None."""
        if not project_names:
            return
        if self.active_filter is None:
            self.active_filter = project_names[0]
            return
        try:
            idx = project_names.index(self.active_filter)
        except ValueError:
            idx = len(project_names) - 1
        self.active_filter = None if idx == len(project_names) - 1 else project_names[idx + 1]

    def handle_key(self, key: str, tasks_by_status: TasksByStatus, project_names: list[str]) -> Action | None:
        if self.mode == Mode.NAVIGATE:
            return self._navigate_key(key, tasks_by_status, project_names)
        if self.mode == Mode.SUMMARY:
            if key == "q":
                return Action("quit")
            if key in ("s", "escape"):
                self.mode = Mode.NAVIGATE
            return None
        if self.mode == Mode.DETAIL:
            if key == "q":
                return Action("quit")
            if key in ("escape", "enter", "o"):
                self.detail_task_id = None
                self.mode = Mode.NAVIGATE
            return None
        if self.mode == Mode.CONFIRM_DELETE:
            task_id = self.pending_delete_id
            if key == "y" and task_id is not None:
                self.pending_delete_id = None
                self.mode = Mode.NAVIGATE
                self.selected_row = max(0, self.selected_row - 1)
                return Action("delete", task_id=task_id)
            if key in ("n", "escape"):
                self.pending_delete_id = None
                self.mode = Mode.NAVIGATE
            return None
        return None

    def _navigate_key(self, key: str, tasks_by_status: TasksByStatus, project_names: list[str]) -> Action | None:
        if key == "q":
            return Action("quit")
        if key == "n":
            self.mode = Mode.INPUT
            self.pending_title = None
            return None
        if key == "s":
            self.mode = Mode.SUMMARY
            return None
        if key == "p":
            self.cycle_filter(project_names)
            self.selected_row = 0
            return None
        if key == "r":
            return Action("refresh")
        if key in ("h", "left"):
            self.active_column = max(0, self.active_column - 1)
            self.selected_row = self._clamp_row(tasks_by_status, self.active_column)
            return None
        if key in ("l", "right"):
            self.active_column = min(len(COLUMNS) - 1, self.active_column + 1)
            self.selected_row = self._clamp_row(tasks_by_status, self.active_column)
            return None
        if key in ("k", "up"):
            self.selected_row = max(0, self.selected_row - 1)
            return None
        if key in ("j", "down"):
            col = self.filter_tasks(tasks_by_status)[self.column_key]
            self.selected_row = max(0, min(len(col) - 1, self.selected_row + 1))
            return None

        task = self.selected_task(tasks_by_status)
        if task is None:
            return None
        if key == "o":
            self.detail_task_id = task.id
            self.mode = Mode.DETAIL
            return None
        if key == "d":
            self.pending_delete_id = task.id
            self.mode = Mode.CONFIRM_DELETE
            return None
        if key in ("enter", "b"):
            step = 1 if key == "enter" else -1
            target = max(0, min(len(COLUMNS) - 1, self.active_column + step))
            if target == self.active_column:
                return None
            self.selected_row = max(0, self.selected_row - 1)
            return Action("move", task_id=task.id, status=COLUMNS[target][0])
        return None

    def submit_input(self, text: str, project_names: list[str] | None = None) -> Action | None:
        """
        Input mode takes either a full shorthand line or a plain title. A plain
        title is held in ``pending_title`` while the next line picks the project
        (a name, or the number of an existing project). Esc at the project step
        goes back to the title step.
        """
        text = text.strip()
        cancel = text.lower() in ("esc", "escape")
        if self.pending_title is not None:
            return self._submit_project(text, cancel, project_names or [])
        if not text or cancel:
            self.mode = Mode.NAVIGATE
            return None
        if is_shorthand(text):
            self.mode = Mode.NAVIGATE
            return Action("create", text=text)
        self.pending_title = text
        self.message = project_prompt(text, project_names or [])
        return None

    def _submit_project(self, text: str, cancel: bool, project_names: list[str]) -> Action | None:
        if cancel:
            self.pending_title = None
            return None
        project = text
        if text.isdigit() and 1 <= int(text) <= len(project_names):
            project = project_names[int(text) - 1]
        if not project or "::" in project:
            self.message = project_prompt(self.pending_title, project_names)
            return None
        title = self.pending_title
        self.pending_title = None
        self.mode = Mode.NAVIGATE
        return Action("create", text=f"{project}::{title}")


def project_prompt(title: str, project_names: list[str]) -> str:
    choices = "  ".join(f"{i}) {name}" for i, name in enumerate(project_names, 1))
    prompt = f'Project for "{title}"? Type a name'
    if choices:
        prompt += f" or pick a number: {choices}"
    return prompt


def keys_from_line(line: str) -> list[str]:
    stripped = line.strip()
    if not stripped:
        return ["enter"]
    lowered = stripped.lower()
    if lowered in ("esc", "escape", "\x1b"):
        return ["escape"]
    if lowered in ("left", "right", "up", "down", "enter"):
        return [lowered]
    return list(stripped)


# -------------------- rendering --------------------

def _visible_len(s: str) -> int:
    return len(ANSI_RE.sub("", s))


def _pad(s: str, width: int) -> str:
    pad = width - _visible_len(s)
    return s + " " * pad if pad > 0 else s


def _task_text(t: TaskOut) -> str:
    text = f"[{t.project_name}] {t.title}"
    if t.duration_minutes:
        text += f" ({format_duration(t.duration_minutes)})"
    return text


def compute_column_widths(columns: Mapping[str, list[TaskOut]], term_width: int) -> dict[str, int]:
    sep_total = len(SEP) * (len(COLUMNS) - 1)
    widths: dict[str, int] = {}
    for key, title in COLUMNS:
        longest = max([len(title)] + [len(_task_text(t)) + 2 for t in columns[key]])
        widths[key] = max(MIN_COL_WIDTH, longest)
    if sum(widths.values()) + sep_total > term_width:
        target_space = max(term_width - sep_total, len(COLUMNS) * MIN_COL_WIDTH)
        while sum(widths.values()) > target_space:
            widest = max(widths, key=lambda k: widths[k])
            if widths[widest] <= MIN_COL_WIDTH:
                break
            widths[widest] -= 1
    else:
        extra = term_width - (sum(widths.values()) + sep_total)
        i = 0
        while extra > 0:
            widths[COLUMNS[i % len(COLUMNS)][0]] += 1
            extra -= 1
            i += 1
    return widths


def _wrap_task(t: TaskOut, width: int, selected: bool, theme: Theme) -> list[str]:
    marker = "> " if selected else "  "
    tag = f"[{t.project_name}]"
    body = _task_text(t)
    lines = textwrap.wrap(body, width=max(1, width - len(marker))) or [body]
    out = []
    for i, raw in enumerate(lines):
        prefix = marker if i == 0 else "  "
        if i == 0 and raw.startswith(tag):
            raw = theme.project(tag, t.project_color) + theme.status(raw[len(tag):], t.status)
        else:
            raw = theme.status(raw, t.status)
        if selected:
            raw = theme.color(prefix, theme.bold) + raw
        else:
            raw = prefix + raw
        out.append(raw)
    return out


def render_columns(columns: Mapping[str, list[TaskOut]], state: BoardState, theme: Theme, term_width: int) -> list[str]:
    widths = compute_column_widths(columns, term_width)
    wrapped: dict[str, list[str]] = {}
    for idx, (key, _) in enumerate(COLUMNS):
        if not columns[key]:
            wrapped[key] = [theme.color("(empty)", theme.dim)]
            continue
        acc: list[str] = []
        for row, t in enumerate(columns[key]):
            selected = state.active_column == idx and state.selected_row == row
            acc.extend(_wrap_task(t, widths[key], selected, theme))
        wrapped[key] = acc

    header_cells = []
    for idx, (key, title) in enumerate(COLUMNS):
        styles = (theme.bold, theme.hex("#06b6d4")) if idx == state.active_column else (theme.bold,)
        header_cells.append(_pad(theme.color(title, *styles), widths[key]))
    lines = [SEP.join(header_cells), SEP.join("-" * widths[k] for k, _ in COLUMNS)]

    rows = max(len(v) for v in wrapped.values())
    for r in range(rows):
        cells = []
        for key, _ in COLUMNS:
            col_lines = wrapped[key]
            cells.append(_pad(col_lines[r], widths[key]) if r < len(col_lines) else " " * widths[key])
        lines.append(SEP.join(cells).rstrip())
    return lines


def render_header(week_id: str, tasks: list[TaskOut], theme: Theme, active_filter: str | None = None) -> str:
    counts = {key: sum(1 for t in tasks if t.status == key) for key, _ in COLUMNS}
    total = counts["todo"] + counts["in-progress"] + counts["done"]
    total_minutes = sum(t.duration_minutes or 0 for t in tasks)
    done_minutes = sum(t.duration_minutes or 0 for t in tasks if t.status == "done")

    parts = [theme.color("WEEKBOARD", theme.bold, theme.hex("#06b6d4")), week_id]
    if active_filter:
        parts.append(theme.status(f"Filter: {active_filter}", "in-progress"))
    left = " | ".join(parts)
    right = (
        f"{theme.status(str(counts['todo']), 'todo')}/"
        f"{theme.status(str(counts['in-progress']), 'in-progress')}/"
        f"{theme.status(str(counts['done']), 'done')} of {total}"
    )
    if total_minutes > 0:
        right += f"  {format_duration(done_minutes)}/{format_duration(total_minutes)}"
    return f"{left}    {right}"


def render_detail(t: TaskOut, theme: Theme) -> list[str]:
    return [
        theme.color(t.title, theme.bold),
        "",
        f"Project:     {theme.project(t.project_name, t.project_color)}",
        f"Status:      {theme.status(STATUS_LABELS.get(t.status, t.status), t.status)}",
        f"Week:        {t.week_id}",
        f"Duration:    {format_duration(t.duration_minutes) if t.duration_minutes else '-'}",
        f"Created:     {t.created_at:%Y-%m-%d %H:%M}",
        f"Updated:     {t.updated_at:%Y-%m-%d %H:%M}",
        "",
        t.description or theme.color("(no description)", theme.dim),
    ]


HELP = {
    Mode.NAVIGATE: "h/l column  j/k row  enter advance  b back  n new  o open  d delete  p filter  s summary  r refresh  q quit",
    Mode.INPUT: "project::title[::description][::duration] or a plain title, then a project  (esc goes back)",
    Mode.SUMMARY: "s/esc back  q quit",
    Mode.DETAIL: "esc/enter/o back  q quit",
    Mode.CONFIRM_DELETE: "y delete  n/esc cancel",
}


# -------------------- terminal loop --------------------

def _clear_screen() -> None:
    print("\033[3J\033[H\033[2J\033[H", end="", flush=True)


def _enter_alt_screen() -> None:
    print("\033[?1049h", end="", flush=True)


def _leave_alt_screen() -> None:
    print("\033[?1049l", end="", flush=True)


class BoardApp:
    def __init__(
        self,
        store: Store,
        theme: Theme,
        week_id: str | None = None,
        alt_screen: bool = True,
        read_line: Callable[[str], str] = input,
        write: Callable[[str], None] = print,
    ):
        self.store = store
        self.theme = theme
        self.week_id = week_id or get_week_id()
        self.alt_screen = alt_screen
        self.read_line = read_line
        self.write = write
        self.state = BoardState()

    def start_session(self) -> int:
        with self.store.session() as db:
            rolled = rollover_tasks(db, self.week_id)
        if rolled:
            self.state.message = f"Rolled over {rolled} unfinished task(s) from previous weeks."
        return rolled

    def _load(self) -> tuple[list[TaskOut], dict[str, list[TaskOut]], list[str]]:
        with self.store.session() as db:
            week_tasks = task_store.get_tasks_by_week(db, self.week_id)
            tasks_by_status = task_store.get_tasks_by_status(db, self.week_id)
            project_names = [p.name for p in task_store.list_projects(db)]
        return week_tasks, tasks_by_status, project_names

    def render(self, week_tasks: list[TaskOut], tasks_by_status: dict[str, list[TaskOut]]) -> list[str]:
        # week_tasks is in store order (position, id)
        lines = [render_header(self.week_id, week_tasks, self.theme, self.state.active_filter), ""]
        mode = self.state.mode
        if mode == Mode.DETAIL:
            task = next((t for t in week_tasks if t.id == self.state.detail_task_id), None)
            lines.extend(render_detail(task, self.theme) if task else ["Task no longer exists."])
        elif mode == Mode.SUMMARY:
            lines.extend(render_summary_view(self.week_id, week_tasks, self.theme.style))
        else:
            term_width = shutil.get_terminal_size((120, 30)).columns
            lines.extend(render_columns(self.state.filter_tasks(tasks_by_status), self.state, self.theme, term_width))
        if mode == Mode.CONFIRM_DELETE:
            task = next((t for t in week_tasks if t.id == self.state.pending_delete_id), None)
            lines.extend(["", f"Delete \"{task.title if task else '?'}\"? (y/n)"])
        lines.append("")
        if self.state.message:
            lines.append(self.state.message)
        lines.append(self.theme.color(HELP[mode], self.theme.dim))
        return lines

    def apply(self, action: Action) -> bool:
        """Carry out an action; returns False when the session should end."""
        if action.kind == "quit":
            return False
        logger.debug("board action %s", action)
        with self.store.session() as db:
            try:
                if action.kind == "move":
                    task_store.move_task(db, action.task_id, action.status)
                elif action.kind == "delete":
                    task_store.delete_task(db, action.task_id)
                elif action.kind == "create":
                    created = task_store.create_task_from_shorthand(db, action.text, self.week_id)
                    self.state.message = f"Created: [{created.project_name}] {created.title}"
                    if created.warnings:
                        self.state.message += "  warning: " + "; ".join(created.warnings)
            except WeekboardError as e:
                self.state.message = f"Error: {e}"
        return True

    def step(self, line: str) -> bool:
        """Process one line of input; returns False to quit."""
        _, tasks_by_status, project_names = self._load()
        self.state.message = ""
        if self.state.mode == Mode.INPUT:
            action = self.state.submit_input(line, project_names)
            return self.apply(action) if action else True
        for key in keys_from_line(line):
            action = self.state.handle_key(key, tasks_by_status, project_names)
            if action:
                return self.apply(action)
        return True

    def run(self) -> None:
        exit_message: str | None = None
        self.start_session()
        if self.alt_screen:
            _enter_alt_screen()
        try:
            while True:
                week_tasks, tasks_by_status, _ = self._load()
                _clear_screen()
                self.write("\n".join(self.render(week_tasks, tasks_by_status)))
                prompt = "\n: "
                if self.state.mode == Mode.INPUT:
                    prompt = "\nproject> " if self.state.pending_title is not None else "\nnew> "
                if not self.step(self.read_line(prompt)):
                    exit_message = "Goodbye."
                    break
        except (KeyboardInterrupt, EOFError):
            exit_message = "Interrupted. Goodbye."
        finally:
            if self.alt_screen:
                _leave_alt_screen()
            if exit_message:
                self.write(exit_message)
