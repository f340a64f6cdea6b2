"""
Shared fixtures: an in-memory database per test and logged-in API clients.
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from backend.app import app
from backend.auth import SESSION_COOKIE, active_sessions, create_session, hash_password
from backend.models import ROLE_SCHEDULER, ROLE_TEACHER, Base, Teacher, get_db

TEACHER_PASSWORD = "teacher-pass-1"
SCHEDULER_PASSWORD = "scheduler-pass-1"


@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def teacher(db_session):
    user = Teacher(
        id="T001",
        name="Ana Torres",
        email="ana@example.com",
        role=ROLE_TEACHER,
        password_hash=hash_password(TEACHER_PASSWORD),
        active=True,
    )
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture
def other_teacher(db_session):
    user = Teacher(
        id="T002",
        name="Bruno Diaz",
        email="bruno@example.com",
        role=ROLE_TEACHER,
        password_hash=hash_password(TEACHER_PASSWORD),
        active=True,
    )
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture
def scheduler(db_session):
    user = Teacher(
        id="S001",
        name="Carla Ruiz",
        email="carla@example.com",
        role=ROLE_SCHEDULER,
        password_hash=hash_password(SCHEDULER_PASSWORD),
        active=True,
    )
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture
def make_client(db_session):
    """Build a TestClient, optionally already logged in as a user."""

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    def _make(user=None):
        client = TestClient(app)
        if user is not None:
            client.cookies.set(SESSION_COOKIE, create_session(user.id, user.role))
        return client

    yield _make

    app.dependency_overrides.clear()
    active_sessions.clear()


@pytest.fixture
def teacher_client(make_client, teacher):
    return make_client(teacher)


@pytest.fixture
def scheduler_client(make_client, scheduler):
    return make_client(scheduler)
