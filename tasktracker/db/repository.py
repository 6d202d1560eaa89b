"""
Task persistence.

``TaskRepository`` wraps a SQLModel session and is the only place that writes
task rows. Every update goes through a version-checked ``UPDATE`` so a stale
read can never overwrite a newer row.
"""
import logging
import math
import uuid
from dataclasses import dataclass
from typing import Dict, List, Optional

from sqlalchemy import delete, update
from sqlmodel import Session, select, func

from ..core.errors import ValidationError, VersionConflictError, NotFoundError
from ..models import Task, TaskTagLink
from ..models.lifecycle import mark_created, mark_deleted, mark_updated, utc_now
from ..search.predicates import ALWAYS, Predicate

logger = logging.getLogger(__name__)

# Columns written by save() and allowed in bulk_update()
UPDATABLE_FIELDS = ("title", "description", "status", "priority", "user_id")
SORTABLE_FIELDS = ("created_at", "updated_at", "title", "status", "priority")


@dataclass
class Page:
    items: List[Task]
    total: int
    page: int
    size: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.size) if self.size else 0


class TaskRepository:
    def __init__(self, session: Session):
        self.session = session

    def fetch_by_id(self, task_id: uuid.UUID) -> Task:
        task = self.session.get(Task, task_id)
        if task is None:
            raise NotFoundError("Task", task_id)
        return task

    def add(self, task: Task) -> Task:
        mark_created(task)
        self.session.add(task)
        self.session.commit()
        self.session.refresh(task)
        return task

    def save(self, task: Task) -> Task:
        """
        Write ``task`` only if its row still has the version it was read with.

        On success the row's version is bumped and ``task`` is refreshed. On a
        mismatch nothing is written, the transaction is rolled back and
        ``VersionConflictError`` is raised.
        """
        task_id = task.id
        read_version = task.version
        mark_updated(task)
        values = {field: getattr(task, field) for field in UPDATABLE_FIELDS}
        values["updated_at"] = task.updated_at

        statement = (
            update(Task)
            .where(Task.id == task_id, Task.version == read_version)
            .values(**values, version=Task.version + 1)
            .execution_options(synchronize_session=False)
        )
        # The in-memory edits must not be flushed as a plain UPDATE
        with self.session.no_autoflush:
            result = self.session.execute(statement)
            self.session.expire(task)

        if result.rowcount == 0:
            self.session.rollback()
            raise VersionConflictError(task_id, read_version)

        self.session.commit()
        self.session.refresh(task)
        return task

    def rollback(self) -> None:
        # Drops pending edits and forces the next fetch to re-read the row
        self.session.rollback()

    def delete(self, task: Task) -> None:
        # Unlink tags through the relationship so the join rows go with it
        task.tags.clear()
        self.session.flush()
        mark_deleted(task)
        self.session.delete(task)
        self.session.commit()

    def find_all(
        self,
        predicate: Predicate = ALWAYS,
        *,
        newest_first: bool = False,
        limit: Optional[int] = None,
    ) -> List[Task]:
        statement = select(Task).where(predicate.clause())
        if newest_first:
            statement = statement.order_by(Task.created_at.desc())
        if limit is not None:
            statement = statement.limit(limit)
        return list(self.session.exec(statement).all())

    def find_page(self, predicate: Predicate, pagination) -> Page:
        if pagination.sort_by not in SORTABLE_FIELDS:
            raise ValidationError(
                f"Cannot sort by '{pagination.sort_by}'; expected one of {', '.join(SORTABLE_FIELDS)}"
            )
        column = getattr(Task, pagination.sort_by)
        order = column.asc() if pagination.ascending else column.desc()

        statement = (
            select(Task)
            .where(predicate.clause())
            .order_by(order, Task.id)
            .offset(pagination.page * pagination.size)
            .limit(pagination.size)
        )
        items = list(self.session.exec(statement).all())
        return Page(
            items=items,
            total=self.count_where(predicate),
            page=pagination.page,
            size=pagination.size,
        )

    def count_where(self, predicate: Predicate = ALWAYS) -> int:
        return self.session.exec(
            select(func.count(Task.id)).where(predicate.clause())
        ).one()

    def bulk_update(self, predicate: Predicate, changes: Dict[str, object]) -> int:
        unknown = set(changes) - set(UPDATABLE_FIELDS)
        if unknown:
            raise ValidationError(f"Cannot bulk update fields: {', '.join(sorted(unknown))}")
        if not changes:
            return 0

        statement = (
            update(Task)
            .where(predicate.clause())
            .values(**changes, updated_at=utc_now(), version=Task.version + 1)
            .execution_options(synchronize_session=False)
        )
        result = self.session.execute(statement)
        self.session.commit()
        logger.info("Bulk update %s on %s affected %d task(s)", changes, predicate, result.rowcount)
        return result.rowcount

    def bulk_delete(self, predicate: Predicate, *, commit: bool = True) -> int:
        task_ids = list(self.session.exec(select(Task.id).where(predicate.clause())).all())
        if not task_ids:
            return 0

        self.session.execute(
            delete(TaskTagLink)
            .where(TaskTagLink.task_id.in_(task_ids))
            .execution_options(synchronize_session=False)
        )
        result = self.session.execute(
            delete(Task).where(Task.id.in_(task_ids)).execution_options(synchronize_session=False)
        )
        if commit:
            self.session.commit()
        logger.info("Bulk delete on %s removed %d task(s)", predicate, result.rowcount)
        return result.rowcount
