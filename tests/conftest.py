import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from app.database import Base, build_engine, get_db
from app.main import app
from app.schemas.user import UserCreate
from app.services.users import UserService


@pytest.fixture
def engine():
    test_engine = build_engine("sqlite://")
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    Base.metadata.drop_all(bind=test_engine)
    test_engine.dispose()


@pytest.fixture
def db(engine):
    TestingSessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(engine):
    TestingSessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)

    def override_get_db():
        session = TestingSessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def test_user():
    return {
        "username": "testuser",
        "email": "test@example.com",
        "password": "testpassword",
        "firstName": "Test",
        "lastName": "User",
    }


@pytest.fixture
def created_user(client: TestClient, test_user):
    response = client.post("/api/users", json=test_user)
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def user_service(db):
    return UserService(db)


@pytest.fixture
def owner(user_service):
    return user_service.create(UserCreate(
        username="owner",
        email="owner@example.com",
        password="secret",
    ))
