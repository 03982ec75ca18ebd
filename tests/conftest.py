from __future__ import annotations

import itertools
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RUN_MIGRATIONS_ON_STARTUP"] = "false"
os.environ["BREAK_SCHEDULER_ENABLED"] = "false"
os.environ["CRONJOB_KEY"] = "test-cron-key"
os.environ["SECRET_KEY"] = "test-secret"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from worktrack.db import get_db  # noqa: E402
from worktrack.main import app  # noqa: E402
from worktrack.models import Base, User  # noqa: E402
from worktrack.routers.auth import get_password_hash  # noqa: E402

PASSWORD = "secret123"
PASSWORD_HASH = get_password_hash(PASSWORD)


@pytest.fixture
def engine(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'worktrack.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_user(db):
    counter = itertools.count(1)

    def _make(role: str = "MEMBER", **fields) -> User:
        n = next(counter)
        user = User(
            email=f"user{n}@example.com",
            full_name=f"User {n}",
            password_hash=PASSWORD_HASH,
            role=role,
            **fields,
        )
        db.add(user)
        db.commit()
        return user

    return _make


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def login(client):
    def _login(user: User) -> None:
        response = client.post("/api/auth/login", data={"email": user.email, "password": PASSWORD})
        assert response.status_code == 200, response.text

    return _login
