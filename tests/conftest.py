# tests/conftest.py

from __future__ import annotations

from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from tasktracker import models  # noqa: F401
from tasktracker.db.session import get_session
from tasktracker.main import app
from tasktracker.models import Task, User


@pytest.fixture()
def engine():
    """
    Fresh in-memory SQLite database per test.

    StaticPool keeps one connection alive so every session sees the same
    in-memory database.
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session(engine) -> Iterator[Session]:
    with Session(engine) as session:
        yield session


@pytest.fixture()
def client(engine) -> Iterator[TestClient]:
    def _get_session_override():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = _get_session_override
    # Not used as a context manager: the lifespan (file DB creation) is skipped
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture()
def user(session: Session) -> User:
    user = User(username="u1", email="u1@example.com")
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@pytest.fixture()
def make_task(session: Session, user: User):
    """Factory inserting tasks owned by ``user``."""

    def _make(title: str = "Write report", **fields) -> Task:
        task = Task(user_id=fields.pop("user_id", user.id), title=title, **fields)
        session.add(task)
        session.commit()
        session.refresh(task)
        return task

    return _make
