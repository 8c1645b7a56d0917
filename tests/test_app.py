from fastapi.testclient import TestClient

from app.main import app
from app.models.task import Task, TaskStatus
from app.models.user import UserRole
from app.services.sample_data import SAMPLE_PASSWORD, SAMPLE_TASKS, seed_sample_data
from app.services.tasks import TaskService
from app.services.users import UserService


def test_root(client: TestClient):
    response = client.get("/")
    assert response.status_code == 200
    assert "version" in response.json()


def test_health(client: TestClient):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_unexpected_error_returns_generic_500(client: TestClient, created_user, monkeypatch):
    def boom(self, user):
        raise RuntimeError("database exploded")

    monkeypatch.setattr(TaskService, "statistics", boom)
    unsafe_client = TestClient(app, raise_server_exceptions=False)

    response = unsafe_client.get(f"/api/tasks/user/{created_user['id']}/statistics")

    assert response.status_code == 500
    assert response.json() == {"message": "An unexpected error occurred"}


def test_unknown_route_keeps_message_shape(client: TestClient):
    response = client.get("/api/nowhere")
    assert response.status_code == 404
    assert "message" in response.json()


def test_seed_sample_data(db):
    assert seed_sample_data(db) == 4

    users = UserService(db)
    assert users.get_by_username("admin").role == UserRole.ADMIN
    assert users.get_by_username("bob.wilson").role == UserRole.MODERATOR
    assert users.validate_credentials("john.doe", SAMPLE_PASSWORD) is True
    assert db.query(Task).count() == len(SAMPLE_TASKS)

    finished = db.query(Task).filter(Task.status == TaskStatus.COMPLETED).one()
    assert finished.title == "Design database schema"
    assert finished.completed_at is not None

    # Running it again leaves existing accounts and their tasks untouched
    assert seed_sample_data(db) == 0
    assert db.query(Task).count() == len(SAMPLE_TASKS)
