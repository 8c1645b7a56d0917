from pydantic import Field, field_validator
from typing import Optional
from datetime import date, datetime

from app.models.task import TaskStatus, TaskPriority
from app.schemas.base import APIModel, to_local_naive
from app.schemas.user import UserSummary


class TaskBase(APIModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: Optional[datetime] = None

    @field_validator("title", mode="before")
    @classmethod
    def strip_title(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("due_date")
    @classmethod
    def normalize_due_date(cls, v):
        return to_local_naive(v)


class TaskCreate(TaskBase):
    user_id: int


# Full replacement of the editable fields; omitting status keeps the stored one
class TaskUpdate(TaskBase):
    status: Optional[TaskStatus] = None


class TaskStatusUpdate(APIModel):
    status: TaskStatus


class Task(APIModel):
    id: int
    title: str
    description: Optional[str] = None
    status: TaskStatus
    priority: TaskPriority
    due_date: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    completed_at: Optional[datetime] = None
    user_id: int
    user: UserSummary


class TaskStatistics(APIModel):
    total: int
    pending: int
    in_progress: int
    completed: int
    cancelled: int


# One row per creation day; exposed as "date" on the wire
class DailyTaskStatistics(APIModel):
    day: date = Field(..., alias="date")
    total_created: int
    pending: int
    in_progress: int
    completed: int
    cancelled: int
