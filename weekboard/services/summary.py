from typing import Callable, Iterable

from sqlalchemy.orm import Session

from ..schemas import ProjectSummary, TaskOut, WeekSummary
from ..store import get_tasks_by_week
from .week import DAY_NAMES, day_of_week, format_duration

STATUS_LABELS = {
    "todo": "TODO",
    "in-progress": "IN PROG",
    "done": "DONE",
    "archived": "ARCHVD",
}

# (column, max width)
TABLE_COLUMNS = [("Project", 12), ("Title", 20), ("Description", 40), ("Time", 6), ("Status", 8)]

# ---------- aggregation ----------

def _minutes(t: TaskOut) -> int:
    return t.duration_minutes or 0


def summarize(week_id: str, tasks: Iterable[TaskOut]) -> WeekSummary:
    """
    Totals for a week:
      - task count / completed count (status == "done")
      - minutes across all tasks / completed tasks (no duration counts as 0)
      - per-project breakdown in first-seen order, keyed by project id
    """
    summary = WeekSummary(week_id=week_id)
    by_project: dict[int, ProjectSummary] = {}

    for t in tasks:
        entry = by_project.get(t.project_id)
        if entry is None:
            entry = ProjectSummary(project_name=t.project_name, project_color=t.project_color)
            by_project[t.project_id] = entry
        done = t.status == "done"

        summary.total_tasks += 1
        summary.total_minutes += _minutes(t)
        entry.total += 1
        entry.minutes += _minutes(t)
        if done:
            summary.completed += 1
            summary.completed_minutes += _minutes(t)
            entry.completed += 1

    summary.by_project = list(by_project.values())
    return summary


def week_summary(db: Session, week_id: str) -> WeekSummary:
    return summarize(week_id, get_tasks_by_week(db, week_id))


def group_by_day(tasks: Iterable[TaskOut]) -> dict[int, list[TaskOut]]:
    """Bucket tasks by the weekday they were created on (0=Monday), keeping input order."""
    groups: dict[int, list[TaskOut]] = {}
    for t in tasks:
        groups.setdefault(day_of_week(t.created_at), []).append(t)
    return groups

# ---------- text output ----------

def export_week_summary(summary: WeekSummary) -> str:
    lines = [f"# Week {summary.week_id} Summary", ""]
    lines.append(f"Tasks: {summary.completed}/{summary.total_tasks} completed")

    if summary.total_minutes > 0:
        lines.append(
            f"Time: {format_duration(summary.completed_minutes)}/{format_duration(summary.total_minutes)}"
        )

    if summary.by_project:
        lines.append("")
        lines.append("## By Project")
        for p in summary.by_project:
            suffix = f" ({format_duration(p.minutes)})" if p.minutes > 0 else ""
            lines.append(f"- {p.project_name}: {p.completed}/{p.total} tasks{suffix}")

    return "\n".join(lines)


def _clip(text: str, width: int) -> str:
    if len(text) <= width:
        return text
    return text[: max(0, width - 1)] + "…"


def _table_rows(day_tasks: list[TaskOut]) -> list[list[str]]:
    return [
        [
            t.project_name,
            t.title,
            t.description or "-",
            format_duration(t.duration_minutes) if t.duration_minutes else "-",
            STATUS_LABELS.get(t.status, t.status.upper()),
        ]
        for t in day_tasks
    ]


def render_summary_view(
    week_id: str,
    tasks: list[TaskOut],
    style: Callable[[str, str], str] | None = None,
) -> list[str]:
    """Day-grouped summary used by the board. ``style(text, role)`` adds color."""
    paint = style or (lambda text, _role: text)
    summary = summarize(week_id, tasks)

    header = f"Week Summary - {week_id}    {summary.completed}/{summary.total_tasks} tasks"
    if summary.total_minutes > 0:
        header += f"  {format_duration(summary.completed_minutes)}/{format_duration(summary.total_minutes)}"
    lines = [paint(header, "header"), ""]

    if not tasks:
        lines.append("No tasks this week. Press Esc to go back, or 'n' to add your first task.")
        return lines

    by_day = group_by_day(tasks)
    for day_idx, day_name in enumerate(DAY_NAMES):
        day_tasks = by_day.get(day_idx)
        if not day_tasks:
            continue
        day_minutes = sum(_minutes(t) for t in day_tasks)
        title = paint(day_name, "day")
        if day_minutes > 0:
            title += f" ({format_duration(day_minutes)})"
        lines.append(title)

        rows = _table_rows(day_tasks)
        widths = []
        for i, (name, max_width) in enumerate(TABLE_COLUMNS):
            longest = max([len(name)] + [len(r[i]) for r in rows])
            widths.append(min(longest, max_width))
        lines.append("  ".join(name.ljust(w) for (name, _), w in zip(TABLE_COLUMNS, widths)).rstrip())
        for row, t in zip(rows, day_tasks):
            cells = [_clip(cell, w).ljust(w) for cell, w in zip(row, widths)]
            cells[-1] = paint(cells[-1], "status:" + t.status)
            lines.append("  ".join(cells).rstrip())
        lines.append("")

    return lines
