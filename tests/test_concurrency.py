# tests/test_concurrency.py

from __future__ import annotations

import uuid
from types import SimpleNamespace

import pytest
from sqlmodel import Session

from tasktracker.core.errors import ConflictError, NotFoundError, VersionConflictError
from tasktracker.db.repository import TaskRepository
from tasktracker.models import Task
from tasktracker.services.concurrency import update_task, update_task_with_retry


class AlwaysConflictingRepo:
    """
    In-memory store whose every save loses the race.

    Keeps call counts so tests can assert how many full read-modify-write
    cycles were attempted.
    """

    def __init__(self) -> None:
        self.stored = SimpleNamespace(id=uuid.uuid4(), title="Write report", status="TODO", version=1)
        self.fetches = 0
        self.saves = 0
        self.rollbacks = 0

    def fetch_by_id(self, task_id):
        if task_id != self.stored.id:
            raise NotFoundError("Task", task_id)
        self.fetches += 1
        return SimpleNamespace(**vars(self.stored))

    def save(self, task):
        self.saves += 1
        raise VersionConflictError(task.id, task.version)

    def rollback(self) -> None:
        self.rollbacks += 1


class InterleavingRepository(TaskRepository):
    """Runs ``competitor`` right before the first save, simulating a concurrent writer."""

    def __init__(self, session: Session, competitor) -> None:
        super().__init__(session)
        self.competitor = competitor
        self.saves = 0

    def save(self, task: Task) -> Task:
        self.saves += 1
        if self.saves == 1:
            self.competitor()
        return super().save(task)


def test_retry_gives_up_after_max_attempts_without_writing() -> None:
    repo = AlwaysConflictingRepo()
    sleeps: list[float] = []

    with pytest.raises(ConflictError) as exc_info:
        update_task_with_retry(repo, repo.stored.id, {"title": "Changed"}, 3, delay=0.1, sleep=sleeps.append)

    assert exc_info.value.attempts == 3
    assert "3 attempts" in str(exc_info.value)
    assert repo.fetches == 3
    assert repo.saves == 3
    assert repo.rollbacks == 3
    # No pause after the last attempt
    assert sleeps == [0.1, 0.1]
    assert repo.stored.title == "Write report"
    assert repo.stored.version == 1


def test_single_attempt_budget_fails_without_sleeping() -> None:
    repo = AlwaysConflictingRepo()
    sleeps: list[float] = []

    with pytest.raises(ConflictError) as exc_info:
        update_task_with_retry(repo, repo.stored.id, {"status": "DONE"}, 1, sleep=sleeps.append)

    assert exc_info.value.attempts == 1
    assert sleeps == []


def test_missing_task_is_not_retried() -> None:
    repo = AlwaysConflictingRepo()
    with pytest.raises(NotFoundError):
        update_task_with_retry(repo, uuid.uuid4(), {"title": "x"}, 3, sleep=lambda _: None)
    assert repo.saves == 0


def test_max_retries_must_be_positive() -> None:
    with pytest.raises(ValueError):
        update_task_with_retry(AlwaysConflictingRepo(), uuid.uuid4(), {}, 0)


def test_concurrent_update_is_retried_after_reload(engine, make_task) -> None:
    task_id = make_task("Write report").id

    def competitor() -> None:
        with Session(engine) as other:
            updated = update_task(TaskRepository(other), task_id, {"status": "IN_PROGRESS"})
            assert updated.version == 2

    sleeps: list[float] = []
    with Session(engine) as mine:
        repo = InterleavingRepository(mine, competitor)
        result = update_task_with_retry(repo, task_id, {"title": "Write final report"}, 3, sleep=sleeps.append)

        assert repo.saves == 2
        assert len(sleeps) == 1
        assert result.version == 3
        assert result.title == "Write final report"
        # The competitor's change survives because the second attempt re-read the row
        assert result.status == "IN_PROGRESS"


def test_update_with_stale_expected_version_is_rejected(session: Session, make_task) -> None:
    task = make_task("Write report")
    repo = TaskRepository(session)
    update_task(repo, task.id, {"status": "DONE"})

    with pytest.raises(VersionConflictError):
        update_task(repo, task.id, {"status": "TODO"}, expected_version=1)

    assert repo.fetch_by_id(task.id).status == "DONE"


def test_update_ignores_protected_fields(session: Session, make_task) -> None:
    task = make_task("Write report")
    updated = update_task(TaskRepository(session), task.id, {"version": 42, "title": "Renamed"})
    assert updated.version == 2
    assert updated.title == "Renamed"
