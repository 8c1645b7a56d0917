import logging
from datetime import date, datetime, time, timedelta
from typing import List, Optional

from sqlalchemy import case, func
from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError
from app.models.task import Task, TaskStatus, TaskPriority
from app.models.user import User
from app.schemas.task import DailyTaskStatistics, TaskStatistics, TaskUpdate
from app.schemas.user import UserTaskSummary

logger = logging.getLogger(__name__)


def count_where(condition):
    return func.count(case((condition, Task.id)))


class TaskService:
    """Task persistence rules, status timestamps and per-user aggregates"""

    def __init__(self, db: Session):
        self.db = db

    def create(self, task: Task) -> Task:
        """Persist a task whose owner has already been resolved by the caller."""
        now = datetime.now()
        task.created_at = now
        task.updated_at = now
        self.db.add(task)
        self.db.commit()
        self.db.refresh(task)

        logger.info("Created task id=%s for user id=%s", task.id, task.user_id)
        return task

    def get_by_id(self, task_id: int) -> Optional[Task]:
        return self.db.get(Task, task_id)

    def list_by_user(self, user: User) -> List[Task]:
        return self._for_user(user).order_by(Task.id).all()

    def list_by_user_and_status(self, user: User, status: TaskStatus) -> List[Task]:
        return self._for_user(user).filter(Task.status == status).order_by(Task.id).all()

    def list_by_user_and_priority(self, user: User, priority: TaskPriority) -> List[Task]:
        return self._for_user(user).filter(Task.priority == priority).order_by(Task.id).all()

    def update(self, task_id: int, task_in: TaskUpdate) -> Task:
        """
        Replace the editable fields of a task.

        completed_at is stamped only on the transition into COMPLETED; moving
        away from COMPLETED leaves it untouched.
        """
        task = self._get_or_raise(task_id)
        new_status = task_in.status if task_in.status is not None else task.status
        now = datetime.now()

        if new_status == TaskStatus.COMPLETED and task.status != TaskStatus.COMPLETED:
            task.completed_at = now

        task.title = task_in.title
        task.description = task_in.description
        task.status = new_status
        task.priority = task_in.priority
        task.due_date = task_in.due_date
        task.updated_at = now

        self.db.commit()
        self.db.refresh(task)

        logger.info("Updated task id=%s", task.id)
        return task

    def update_status(self, task_id: int, status: TaskStatus) -> Task:
        """Set the status; COMPLETED always re-stamps completed_at."""
        task = self._get_or_raise(task_id)
        now = datetime.now()

        task.status = status
        task.updated_at = now
        if status == TaskStatus.COMPLETED:
            task.completed_at = now

        self.db.commit()
        self.db.refresh(task)

        logger.info("Task id=%s moved to %s", task.id, status.value)
        return task

    def delete(self, task_id: int) -> None:
        task = self._get_or_raise(task_id)
        self.db.delete(task)
        self.db.commit()

        logger.info("Deleted task id=%s", task_id)

    def list_overdue(self, user: User) -> List[Task]:
        # Only COMPLETED is excluded; cancelled tasks past their due date still show up
        return (
            self._for_user(user)
            .filter(Task.due_date < datetime.now(), Task.status != TaskStatus.COMPLETED)
            .order_by(Task.due_date)
            .all()
        )

    def list_due_soon(self, user: User, days: int) -> List[Task]:
        start = datetime.now()
        try:
            end = start + timedelta(days=days)
        except OverflowError:
            end = datetime.max
        return (
            self._for_user(user)
            .filter(
                Task.due_date.between(start, end),
                Task.status != TaskStatus.COMPLETED,
            )
            .order_by(Task.due_date)
            .all()
        )

    def count_by_status(self, user: User, status: TaskStatus) -> int:
        return self._for_user(user).filter(Task.status == status).count()

    def statistics(self, user: User) -> TaskStatistics:
        """Per-status counts; total is their sum rather than a separate row count."""
        pending = self.count_by_status(user, TaskStatus.PENDING)
        in_progress = self.count_by_status(user, TaskStatus.IN_PROGRESS)
        completed = self.count_by_status(user, TaskStatus.COMPLETED)
        cancelled = self.count_by_status(user, TaskStatus.CANCELLED)

        return TaskStatistics(
            total=pending + in_progress + completed + cancelled,
            pending=pending,
            in_progress=in_progress,
            completed=completed,
            cancelled=cancelled,
        )

    def list_high_priority_pending(self, user: User) -> List[Task]:
        # Enums are stored as names, so rank them explicitly instead of sorting strings
        priority_rank = case(
            (Task.priority == TaskPriority.URGENT, 2),
            (Task.priority == TaskPriority.HIGH, 1),
            else_=0,
        )
        return (
            self._for_user(user)
            .filter(
                Task.priority.in_([TaskPriority.HIGH, TaskPriority.URGENT]),
                Task.status == TaskStatus.PENDING,
            )
            .order_by(priority_rank.desc(), Task.due_date.asc())
            .all()
        )

    def list_completed_in_range(self, user: User, start: datetime, end: datetime) -> List[Task]:
        return (
            self._for_user(user)
            .filter(
                Task.status == TaskStatus.COMPLETED,
                Task.completed_at.between(start, end),
            )
            .order_by(Task.completed_at)
            .all()
        )

    def user_summaries(self) -> List[UserTaskSummary]:
        """Task counts for every active user, including users without tasks."""
        now = datetime.now()
        rows = (
            self.db.query(
                User.id,
                User.username,
                User.email,
                User.first_name,
                User.last_name,
                func.count(Task.id).label("total_tasks"),
                count_where(Task.status == TaskStatus.PENDING).label("pending_tasks"),
                count_where(Task.status == TaskStatus.IN_PROGRESS).label("in_progress_tasks"),
                count_where(Task.status == TaskStatus.COMPLETED).label("completed_tasks"),
                count_where(Task.status == TaskStatus.CANCELLED).label("cancelled_tasks"),
                count_where(
                    (Task.due_date < now)
                    & Task.status.notin_([TaskStatus.COMPLETED, TaskStatus.CANCELLED])
                ).label("overdue_tasks"),
            )
            .outerjoin(Task, Task.user_id == User.id)
            .filter(User.is_active.is_(True))
            .group_by(User.id, User.username, User.email, User.first_name, User.last_name)
            .order_by(User.id)
            .all()
        )
        return [UserTaskSummary.model_validate(dict(row._mapping)) for row in rows]

    def daily_statistics(self, days: int = 30) -> List[DailyTaskStatistics]:
        """Tasks created per day over the last `days` days, split by current status, newest day first."""
        since = datetime.combine(date.today(), time.min) - timedelta(days=days)
        day = func.date(Task.created_at)

        rows = (
            self.db.query(
                day.label("day"),
                func.count(Task.id).label("total_created"),
                count_where(Task.status == TaskStatus.PENDING).label("pending"),
                count_where(Task.status == TaskStatus.IN_PROGRESS).label("in_progress"),
                count_where(Task.status == TaskStatus.COMPLETED).label("completed"),
                count_where(Task.status == TaskStatus.CANCELLED).label("cancelled"),
            )
            .filter(Task.created_at >= since)
            .group_by(day)
            .order_by(day.desc())
            .all()
        )
        return [DailyTaskStatistics.model_validate(dict(row._mapping)) for row in rows]

    # ---- helpers ----

    def _for_user(self, user: User):
        return self.db.query(Task).filter(Task.user_id == user.id)

    def _get_or_raise(self, task_id: int) -> Task:
        task = self.get_by_id(task_id)
        if task is None:
            raise NotFoundError(f"Task not found with ID: {task_id}")
        return task
