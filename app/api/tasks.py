from datetime import datetime
from typing import List
from fastapi import APIRouter, Depends, HTTPException, Path, Query, status

from app.api.deps import get_task_owner, get_task_service, get_user_service
from app.core.exceptions import NotFoundError
from app.models.task import Task as TaskModel, TaskStatus, TaskPriority
from app.models.user import User as UserModel
from app.schemas.base import Message, to_local_naive
from app.schemas.task import Task, TaskCreate, TaskUpdate, TaskStatusUpdate, TaskStatistics, DailyTaskStatistics
from app.schemas.user import UserTaskSummary
from app.services.tasks import TaskService
from app.services.users import UserService

router = APIRouter()

MAX_LOOKAHEAD_DAYS = 36500


@router.post("", response_model=Task, status_code=status.HTTP_201_CREATED)
def create_task(
    task_in: TaskCreate,
    users: UserService = Depends(get_user_service),
    tasks: TaskService = Depends(get_task_service),
):
    """Create a task for the user named by `userId`"""
    owner = users.get_by_id(task_in.user_id)
    if owner is None:
        raise NotFoundError(f"User not found with ID: {task_in.user_id}")

    task = TaskModel(
        **task_in.model_dump(exclude={"user_id"}),
        status=TaskStatus.PENDING,
        user=owner,
    )
    return tasks.create(task)


@router.get("/summary", response_model=List[UserTaskSummary])
def read_user_summaries(tasks: TaskService = Depends(get_task_service)):
    """Task counts per active user"""
    return tasks.user_summaries()


@router.get("/statistics/daily", response_model=List[DailyTaskStatistics])
def read_daily_statistics(
    days: int = Query(30, ge=1, le=MAX_LOOKAHEAD_DAYS, description="Number of days to look back"),
    tasks: TaskService = Depends(get_task_service),
):
    """Tasks created per day, broken down by status"""
    return tasks.daily_statistics(days)


@router.get("/user/{user_id}", response_model=List[Task])
def read_user_tasks(
    owner: UserModel = Depends(get_task_owner),
    tasks: TaskService = Depends(get_task_service),
):
    return tasks.list_by_user(owner)


@router.get("/user/{user_id}/status/{task_status}", response_model=List[Task])
def read_user_tasks_by_status(
    task_status: TaskStatus,
    owner: UserModel = Depends(get_task_owner),
    tasks: TaskService = Depends(get_task_service),
):
    return tasks.list_by_user_and_status(owner, task_status)


@router.get("/user/{user_id}/priority/{priority}", response_model=List[Task])
def read_user_tasks_by_priority(
    priority: TaskPriority,
    owner: UserModel = Depends(get_task_owner),
    tasks: TaskService = Depends(get_task_service),
):
    return tasks.list_by_user_and_priority(owner, priority)


@router.get("/user/{user_id}/overdue", response_model=List[Task])
def read_overdue_tasks(
    owner: UserModel = Depends(get_task_owner),
    tasks: TaskService = Depends(get_task_service),
):
    """Tasks past their due date that are not completed"""
    return tasks.list_overdue(owner)


@router.get("/user/{user_id}/due-soon/{days}", response_model=List[Task])
def read_tasks_due_soon(
    days: int = Path(..., ge=0, le=MAX_LOOKAHEAD_DAYS, description="Number of days to look ahead"),
    owner: UserModel = Depends(get_task_owner),
    tasks: TaskService = Depends(get_task_service),
):
    return tasks.list_due_soon(owner, days)


@router.get("/user/{user_id}/statistics", response_model=TaskStatistics)
def read_task_statistics(
    owner: UserModel = Depends(get_task_owner),
    tasks: TaskService = Depends(get_task_service),
):
    return tasks.statistics(owner)


@router.get("/user/{user_id}/high-priority", response_model=List[Task])
def read_high_priority_pending_tasks(
    owner: UserModel = Depends(get_task_owner),
    tasks: TaskService = Depends(get_task_service),
):
    """Pending HIGH/URGENT tasks, most urgent first"""
    return tasks.list_high_priority_pending(owner)


@router.get("/user/{user_id}/completed", response_model=List[Task])
def read_completed_tasks(
    start: datetime = Query(..., description="Earliest completion time (inclusive)"),
    end: datetime = Query(..., description="Latest completion time (inclusive)"),
    owner: UserModel = Depends(get_task_owner),
    tasks: TaskService = Depends(get_task_service),
):
    return tasks.list_completed_in_range(owner, to_local_naive(start), to_local_naive(end))


@router.get("/{task_id}", response_model=Task)
def read_task(task_id: int, tasks: TaskService = Depends(get_task_service)):
    task = tasks.get_by_id(task_id)
    if task is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")
    return task


@router.put("/{task_id}", response_model=Task)
def update_task(task_id: int, task_in: TaskUpdate, tasks: TaskService = Depends(get_task_service)):
    """Replace title, description, priority, due date and (optionally) status"""
    return tasks.update(task_id, task_in)


@router.put("/{task_id}/status", response_model=Task)
def update_task_status(
    task_id: int,
    status_in: TaskStatusUpdate,
    tasks: TaskService = Depends(get_task_service),
):
    return tasks.update_status(task_id, status_in.status)


@router.delete("/{task_id}", response_model=Message)
def delete_task(task_id: int, tasks: TaskService = Depends(get_task_service)):
    tasks.delete(task_id)
    return Message(message="Task deleted successfully")
