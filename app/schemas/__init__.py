from .base import Message
from .user import User, UserCreate, UserUpdate, UserLogin, UserSummary, RoleUpdate, UserTaskSummary
from .task import Task, TaskCreate, TaskUpdate, TaskStatusUpdate, TaskStatistics, DailyTaskStatistics

__all__ = [
    "Message",
    "User", "UserCreate", "UserUpdate", "UserLogin", "UserSummary", "RoleUpdate", "UserTaskSummary",
    "Task", "TaskCreate", "TaskUpdate", "TaskStatusUpdate", "TaskStatistics", "DailyTaskStatistics",
]
