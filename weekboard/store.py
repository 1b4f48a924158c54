"""Task store: CRUD over an explicit SQLAlchemy session.

Every function takes the session as its first argument; nothing here opens
its own connection.
"""
import logging
from datetime import datetime

from sqlalchemy import func
from sqlalchemy.orm import Session

from . import models
from .exceptions import (
    InvalidShorthandError,
    InvalidStatusError,
    ProjectInUseError,
    TaskNotFoundError,
)
from .schemas import TaskCreate, TaskOut
from .services.parser import is_shorthand, parse_shorthand

logger = logging.getLogger(__name__)

PROJECT_COLORS = [
    "#6366f1",  # indigo
    "#f59e0b",  # amber
    "#10b981",  # emerald
    "#ef4444",  # red
    "#8b5cf6",  # violet
    "#06b6d4",  # cyan
    "#f97316",  # orange
    "#ec4899",  # pink
    "#14b8a6",  # teal
    "#84cc16",  # lime
]


def next_color(count: int) -> str:
    return PROJECT_COLORS[count % len(PROJECT_COLORS)]


def _task_out(t: models.Task, warnings: list[str] | None = None) -> TaskOut:
    return TaskOut(
        id=t.id,
        title=t.title,
        description=t.description,
        status=t.status,
        project_id=t.project_id,
        project_name=t.project.name,
        project_color=t.project.color,
        week_id=t.week_id,
        duration_minutes=t.duration_minutes,
        position=t.position,
        created_at=t.created_at,
        updated_at=t.updated_at,
        warnings=warnings or [],
    )


def _check_status(status: str) -> None:
    if status not in models.TASK_STATUSES:
        raise InvalidStatusError(
            f"Invalid status {status!r}; expected one of {', '.join(models.TASK_STATUSES)}"
        )


# ---------- projects ----------

def list_projects(db: Session) -> list[models.Project]:
    return db.query(models.Project).order_by(models.Project.id.asc()).all()


def get_project_by_name(db: Session, name: str) -> models.Project | None:
    return db.query(models.Project).filter(models.Project.name == name).first()


def ensure_project(db: Session, name: str) -> models.Project:
    """Get or create a project by name. New projects get the next palette color."""
    existing = get_project_by_name(db, name)
    if existing:
        return existing
    count = db.query(func.count(models.Project.id)).scalar() or 0
    p = models.Project(name=name, color=next_color(count))
    db.add(p); db.commit(); db.refresh(p)
    logger.info("Created project %s (%s)", p.name, p.color)
    return p


def update_project(db: Session, project_id: int, name: str | None = None, color: str | None = None) -> models.Project | None:
    p = db.get(models.Project, project_id)
    if not p:
        return None
    if name is not None:
        p.name = name
    if color is not None:
        p.color = color
    db.commit(); db.refresh(p)
    return p


def delete_project(db: Session, project_id: int) -> bool:
    p = db.get(models.Project, project_id)
    if not p:
        return False
    n = db.query(func.count(models.Task.id)).filter(models.Task.project_id == project_id).scalar() or 0
    if n:
        raise ProjectInUseError(f"Project {p.name!r} still has {n} task(s)")
    db.delete(p); db.commit()
    return True


# ---------- weeks ----------

def get_all_week_ids(db: Session) -> list[str]:
    rows = db.query(models.Task.week_id).distinct().order_by(models.Task.week_id.asc()).all()
    return [w for (w,) in rows]


def get_tasks_by_week(db: Session, week_id: str) -> list[TaskOut]:
    rows = (
        db.query(models.Task)
        .join(models.Project, models.Task.project_id == models.Project.id)
        .filter(models.Task.week_id == week_id)
        .order_by(models.Task.position.asc(), models.Task.id.asc())
        .all()
    )
    return [_task_out(t) for t in rows]


def get_tasks_by_status(db: Session, week_id: str) -> dict[str, list[TaskOut]]:
    grouped: dict[str, list[TaskOut]] = {s: [] for s in models.TASK_STATUSES}
    for t in get_tasks_by_week(db, week_id):
        grouped.setdefault(t.status, []).append(t)
    return grouped


# ---------- tasks ----------

def get_task(db: Session, task_id: int) -> TaskOut | None:
    t = db.get(models.Task, task_id)
    return _task_out(t) if t else None


def _next_position(db: Session, week_id: str) -> int:
    max_pos = db.query(func.max(models.Task.position)).filter(models.Task.week_id == week_id).scalar()
    return 0 if max_pos is None else max_pos + 1


def create_task(db: Session, payload: TaskCreate, week_id: str, warnings: list[str] | None = None) -> TaskOut:
    project = ensure_project(db, payload.project)
    now = datetime.now()
    t = models.Task(
        title=payload.title,
        description=payload.description,
        status="todo",
        project_id=project.id,
        week_id=week_id,
        duration_minutes=payload.duration_minutes,
        position=payload.position if payload.position is not None else _next_position(db, week_id),
        created_at=now,
        updated_at=now,
    )
    db.add(t); db.commit(); db.refresh(t)
    logger.info("Created task %d [%s] %s in %s", t.id, project.name, t.title, week_id)
    return _task_out(t, warnings)


def create_task_from_shorthand(db: Session, text: str, week_id: str) -> TaskOut:
    if not is_shorthand(text):
        raise InvalidShorthandError("Input must use shorthand syntax (project::title)")
    draft = parse_shorthand(text)
    if draft is None:
        raise InvalidShorthandError(f"Invalid shorthand syntax: {text!r}")
    payload = TaskCreate(
        project=draft.project,
        title=draft.title,
        description=draft.description,
        duration_minutes=draft.duration_minutes,
    )
    return create_task(db, payload, week_id, warnings=draft.warnings)


UPDATABLE_FIELDS = {"title", "description", "status", "duration_minutes", "position"}


def update_task(db: Session, task_id: int, **fields) -> TaskOut | None:
    unknown = set(fields) - UPDATABLE_FIELDS
    if unknown:
        raise TypeError(f"Cannot update task field(s): {', '.join(sorted(unknown))}")
    if "status" in fields:
        _check_status(fields["status"])
    t = db.get(models.Task, task_id)
    if not t:
        return None
    for k, v in fields.items():
        setattr(t, k, v)
    t.updated_at = datetime.now()
    db.commit(); db.refresh(t)
    logger.debug("Updated task %d: %s", task_id, fields)
    return _task_out(t)


def move_task(db: Session, task_id: int, status: str) -> TaskOut:
    t = update_task(db, task_id, status=status)
    if t is None:
        raise TaskNotFoundError(f"Task {task_id} not found")
    return t


def change_task_project(db: Session, task_id: int, project_name: str) -> TaskOut | None:
    t = db.get(models.Task, task_id)
    if not t:
        return None
    project = ensure_project(db, project_name)
    t.project_id = project.id
    t.updated_at = datetime.now()
    db.commit(); db.refresh(t)
    return _task_out(t)


def delete_task(db: Session, task_id: int) -> bool:
    n = db.query(models.Task).filter(models.Task.id == task_id).delete(synchronize_session=False)
    db.commit()
    if n:
        logger.info("Deleted task %d", task_id)
    return n > 0
