from fastapi import Depends
from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError
from app.database import get_db
from app.models.user import User
from app.services.tasks import TaskService
from app.services.users import UserService


def get_user_service(db: Session = Depends(get_db)) -> UserService:
    return UserService(db)


def get_task_service(db: Session = Depends(get_db)) -> TaskService:
    return TaskService(db)


def get_task_owner(user_id: int, users: UserService = Depends(get_user_service)) -> User:
    """Resolve the `user_id` path parameter; an unknown id is a bad request, not a 404."""
    user = users.get_by_id(user_id)
    if user is None:
        raise NotFoundError(f"User not found with ID: {user_id}")
    return user
