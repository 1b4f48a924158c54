import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

import sqlalchemy as sa
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session

from .config import Settings
from . import models

logger = logging.getLogger(__name__)


def make_engine(database_url: str) -> Engine:
    if database_url.startswith("sqlite:///") and not database_url.endswith(":memory:"):
        Path(database_url[len("sqlite:///"):]).parent.mkdir(parents=True, exist_ok=True)
    engine = create_engine(database_url, pool_pre_ping=True, future=True)

    if engine.dialect.name == "sqlite":
        @event.listens_for(engine, "connect")
        def _sqlite_pragmas(dbapi_conn, _record):
            cur = dbapi_conn.cursor()
            if database_url != "sqlite://" and not database_url.endswith(":memory:"):
                cur.execute("PRAGMA journal_mode=WAL")
            cur.execute("PRAGMA foreign_keys=ON")
            cur.close()

    return engine


def init_db(engine: Engine) -> None:
    # create tables for all models, then idempotent column fixes
    models.Base.metadata.create_all(bind=engine)
    _ensure_task_position_column(engine)


def _ensure_task_position_column(engine: Engine) -> None:
    """
    Databases created before board ordering existed lack tasks.position.
    Skip if table doesn't exist; create_all() has already handled fresh DBs.
    """
    insp = sa.inspect(engine)
    if not insp.has_table("tasks"):
        return
    cols = [c["name"] for c in insp.get_columns("tasks")]
    if "position" not in cols:
        with engine.begin() as conn:
            conn.exec_driver_sql("ALTER TABLE tasks ADD COLUMN position INTEGER NOT NULL DEFAULT 0;")
        logger.info("[migrate] Added tasks.position (DEFAULT 0)")


class Store:
    """The store handle: one engine + session factory, built once per process."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.engine = make_engine(settings.resolved_database_url)
        self.SessionLocal = sessionmaker(bind=self.engine, autocommit=False, autoflush=False)
        init_db(self.engine)

    @contextmanager
    def session(self) -> Iterator[Session]:
        db = self.SessionLocal()
        try:
            yield db
        finally:
            db.close()

    def dispose(self) -> None:
        self.engine.dispose()
