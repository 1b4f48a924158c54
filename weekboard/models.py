from datetime import datetime

from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy import Column, DateTime, Index, Integer, String, Text, ForeignKey

Base = declarative_base()

TASK_STATUSES = ("todo", "in-progress", "done", "archived")
DEFAULT_PROJECT_COLOR = "#6366f1"


class Project(Base):
    __tablename__ = "projects"
    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False, unique=True)
    color = Column(String, nullable=False, default=DEFAULT_PROJECT_COLOR)   # "#rrggbb"
    created_at = Column(DateTime, default=datetime.now, nullable=False)

    tasks = relationship("Task", back_populates="project")


class Task(Base):
    __tablename__ = "tasks"
    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    status = Column(String, nullable=False, default="todo")     # see TASK_STATUSES
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=False)
    week_id = Column(String, nullable=False)                    # ISO week: "2026-W07"
    duration_minutes = Column(Integer, nullable=True)
    position = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=datetime.now, nullable=False)
    updated_at = Column(DateTime, default=datetime.now, nullable=False)

    project = relationship("Project", back_populates="tasks")

    __table_args__ = (
        Index("idx_tasks_week", "week_id"),
        Index("idx_tasks_project", "project_id"),
        Index("idx_tasks_status", "status"),
    )
