from datetime import datetime
from pydantic import BaseModel, Field


class TaskDraft(BaseModel):
    """Result of parsing project::title::description::duration shorthand."""
    project: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    description: str | None = None
    duration_minutes: int | None = Field(None, ge=0)
    warnings: list[str] = Field(default_factory=list)


class TaskCreate(BaseModel):
    project: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    description: str | None = None
    duration_minutes: int | None = Field(None, ge=0)
    position: int | None = None


class TaskOut(BaseModel):
    id: int
    title: str
    description: str | None = None
    status: str = "todo"
    project_id: int
    project_name: str
    project_color: str
    week_id: str
    duration_minutes: int | None = None
    position: int = 0
    created_at: datetime
    updated_at: datetime
    warnings: list[str] = Field(default_factory=list)


class ProjectSummary(BaseModel):
    project_name: str
    project_color: str
    total: int = 0
    completed: int = 0
    minutes: int = 0


class WeekSummary(BaseModel):
    week_id: str
    total_tasks: int = 0
    completed: int = 0
    total_minutes: int = 0
    completed_minutes: int = 0
    by_project: list[ProjectSummary] = Field(default_factory=list)
