from .user import User, UserRole
from .task import Task, TaskStatus, TaskPriority

__all__ = ["User", "UserRole", "Task", "TaskStatus", "TaskPriority"]
