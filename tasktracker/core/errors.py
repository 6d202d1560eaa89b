import uuid
from typing import Any


class TaskTrackerError(Exception):
    """Base class for errors the API translates into HTTP responses."""

    status_code = 500

    @property
    def detail(self) -> str:
        return str(self)


class NotFoundError(TaskTrackerError):
    status_code = 404

    def __init__(self, entity: str, key: Any):
        self.entity = entity
        self.key = key
        super().__init__(f"{entity} not found with id: {key}")


class ValidationError(TaskTrackerError):
    status_code = 400


class DuplicateNameError(TaskTrackerError):
    status_code = 409

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Tag already exists: {name}")


class VersionConflictError(TaskTrackerError):
    """The stored version no longer matches the version read by the caller."""

    status_code = 409

    def __init__(self, task_id: uuid.UUID, expected_version: int):
        self.task_id = task_id
        self.expected_version = expected_version
        super().__init__(
            f"Task {task_id} was modified concurrently (expected version {expected_version})"
        )


class ConflictError(TaskTrackerError):
    """Raised when every retry of an optimistic update hit a version conflict."""

    status_code = 409

    def __init__(self, task_id: uuid.UUID, attempts: int):
        self.task_id = task_id
        self.attempts = attempts
        super().__init__(f"Failed to update task {task_id} after {attempts} attempts")
