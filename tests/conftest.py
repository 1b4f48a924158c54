from datetime import datetime

import pytest

from weekboard.config import Settings
from weekboard.deps import Store
from weekboard import models


@pytest.fixture
def store(tmp_path):
    s = Store(Settings(database_url=f"sqlite:///{tmp_path / 'weekboard.db'}", color="never"))
    yield s
    s.dispose()


@pytest.fixture
def db(store):
    with store.session() as session:
        yield session


@pytest.fixture
def add_task(db):
    """Insert a task row directly, bypassing the week-of-today default."""
    def _add(title, week_id, status="todo", project="Work", duration=None, created_at=None, position=0):
        from weekboard.store import ensure_project
        p = ensure_project(db, project)
        when = created_at or datetime(2026, 2, 10, 9, 0)
        t = models.Task(
            title=title,
            status=status,
            project_id=p.id,
            week_id=week_id,
            duration_minutes=duration,
            position=position,
            created_at=when,
            updated_at=when,
        )
        db.add(t)
        db.commit()
        return t.id
    return _add
