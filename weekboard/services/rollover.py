import logging
from datetime import datetime

from sqlalchemy import and_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .. import models
from ..store import get_all_week_ids

logger = logging.getLogger(__name__)

TERMINAL_STATUSES = ("done", "archived")


def rollover_tasks(db: Session, current_week_id: str, now: datetime | None = None) -> int:
    """
    Move unfinished tasks from earlier weeks into ``current_week_id``.

    Week ids compare as plain strings ("2025-W53" < "2026-W01"). Every moved task
    is reset to "todo". Each task is committed on its own, so an interrupted
    run leaves finished moves in place and can simply be run again. Store
    errors roll back the failing task and propagate.
    """
    previous_weeks = [w for w in get_all_week_ids(db) if w < current_week_id]

    rolled_over = 0
    for week_id in previous_weeks:
        unfinished = db.query(models.Task).filter(
            and_(models.Task.week_id == week_id,
                 models.Task.status.not_in(TERMINAL_STATUSES))
        ).all()

        for t in unfinished:
            task_id = t.id
            t.week_id = current_week_id
            t.status = "todo"
            t.updated_at = now or datetime.now()
            try:
                db.commit()
            except SQLAlchemyError:
                db.rollback()
                logger.error("[rollover] failed to move task %d from %s", task_id, week_id)
                raise
            rolled_over += 1

    if rolled_over:
        logger.info("[rollover] moved %d task(s) into %s", rolled_over, current_week_id)
    return rolled_over
