import logging
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from app.models.task import Task, TaskStatus, TaskPriority
from app.models.user import UserRole
from app.schemas.user import UserCreate
from app.services.tasks import TaskService
from app.services.users import UserService

logger = logging.getLogger(__name__)

SAMPLE_PASSWORD = "password123"

SAMPLE_USERS = [
    ("admin", "admin@example.com", "Admin", "User", UserRole.ADMIN),
    ("john.doe", "john.doe@example.com", "John", "Doe", UserRole.USER),
    ("jane.smith", "jane.smith@example.com", "Jane", "Smith", UserRole.USER),
    ("bob.wilson", "bob.wilson@example.com", "Bob", "Wilson", UserRole.MODERATOR),
]

# (owner username, title, description, status, priority, due in days)
SAMPLE_TASKS = [
    ("admin", "Complete project documentation",
     "Write comprehensive documentation for the full-stack application",
     TaskStatus.PENDING, TaskPriority.HIGH, 7),
    ("admin", "Implement user authentication", "Add JWT-based authentication system",
     TaskStatus.IN_PROGRESS, TaskPriority.URGENT, 3),
    ("john.doe", "Design database schema", "Create ERD and implement database tables",
     TaskStatus.COMPLETED, TaskPriority.MEDIUM, -5),
    ("john.doe", "Setup CI/CD pipeline", "Configure automated testing and deployment",
     TaskStatus.PENDING, TaskPriority.HIGH, 10),
    ("jane.smith", "Write unit tests", "Create comprehensive test suite for all components",
     TaskStatus.IN_PROGRESS, TaskPriority.MEDIUM, 5),
    ("jane.smith", "Code review and refactoring", "Review code quality and refactor as needed",
     TaskStatus.PENDING, TaskPriority.LOW, 14),
    ("bob.wilson", "Performance optimization", "Optimize application performance and database queries",
     TaskStatus.PENDING, TaskPriority.MEDIUM, 21),
    ("bob.wilson", "Security audit", "Conduct security review and implement fixes",
     TaskStatus.PENDING, TaskPriority.HIGH, 7),
]


def seed_sample_data(db: Session) -> int:
    """
    Insert the demo accounts and their tasks.

    Accounts whose username already exists are left alone, and so are their
    tasks. Returns the number of accounts created.
    """
    users = UserService(db)
    tasks = TaskService(db)
    created = {}

    for username, email, first_name, last_name, role in SAMPLE_USERS:
        if users.username_exists(username):
            continue
        user = users.create(UserCreate(
            username=username,
            email=email,
            first_name=first_name,
            last_name=last_name,
            password=SAMPLE_PASSWORD,
        ))
        if role != UserRole.USER:
            user = users.update_role(user.id, role)
        created[username] = user

    now = datetime.now()
    for owner, title, description, status, priority, due_in in SAMPLE_TASKS:
        if owner not in created:
            continue
        task = tasks.create(Task(
            title=title,
            description=description,
            priority=priority,
            due_date=now + timedelta(days=due_in),
            user=created[owner],
        ))
        if status != TaskStatus.PENDING:
            tasks.update_status(task.id, status)

    logger.info("Seeded %d sample users", len(created))
    return len(created)
