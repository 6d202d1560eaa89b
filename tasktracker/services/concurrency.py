"""
Optimistic-locking updates for tasks.

``update_task`` makes a single attempt. ``update_task_with_retry`` repeats the
whole read-modify-write cycle after a version conflict, pausing a fixed delay
between attempts. Neither guarantees progress under sustained contention.
"""
import logging
import time
import uuid
from typing import Callable, Dict, Optional

from ..core.config import settings
from ..core.errors import ConflictError, VersionConflictError
from ..models import Task

logger = logging.getLogger(__name__)


def apply_changes(task: Task, changes: Dict[str, object]) -> Task:
    for key, value in changes.items():
        if key in ("id", "version", "created_at", "updated_at"):
            continue
        setattr(task, key, value)
    return task


def update_task(
    repo,
    task_id: uuid.UUID,
    changes: Dict[str, object],
    expected_version: Optional[int] = None,
) -> Task:
    """Apply ``changes`` once; a stale ``expected_version`` fails immediately."""
    task = repo.fetch_by_id(task_id)
    if expected_version is not None and task.version != expected_version:
        raise VersionConflictError(task_id, expected_version)
    apply_changes(task, changes)
    return repo.save(task)


def update_task_with_retry(
    repo,
    task_id: uuid.UUID,
    changes: Dict[str, object],
    max_retries: Optional[int] = None,
    *,
    delay: Optional[float] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> Task:
    """
    Fetch, apply ``changes`` and save, retrying on ``VersionConflictError``.

    At most ``max_retries`` attempts are made (defaults to
    ``settings.TASK_UPDATE_MAX_RETRIES``). ``NotFoundError`` and any other
    storage error propagate on the first occurrence. When every attempt
    conflicts, ``ConflictError`` is raised with the attempt count.
    """
    if max_retries is None:
        max_retries = settings.TASK_UPDATE_MAX_RETRIES
    if delay is None:
        delay = settings.TASK_UPDATE_RETRY_DELAY
    if max_retries < 1:
        raise ValueError("max_retries must be at least 1")

    attempts = 0
    while attempts < max_retries:
        task = repo.fetch_by_id(task_id)
        apply_changes(task, changes)
        try:
            updated = repo.save(task)
        except VersionConflictError as exc:
            attempts += 1
            repo.rollback()
            logger.warning(
                "Version conflict on task %s (read version %s), attempt %d/%d",
                task_id, exc.expected_version, attempts, max_retries,
            )
            if attempts < max_retries:
                sleep(delay)
            continue

        if attempts:
            logger.info("Task %s updated to version %s after %d conflict(s)", task_id, updated.version, attempts)
        return updated

    logger.info("Giving up on task %s after %d attempts", task_id, attempts)
    raise ConflictError(task_id, attempts)
