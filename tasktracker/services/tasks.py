from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional
import uuid

from sqlmodel import Session, select, func

from ..core.errors import NotFoundError
from ..db.repository import Page, TaskRepository
from ..models import Tag, Task, User
from ..models.lifecycle import utc_now
from ..schemas.search import Pagination, TaskSearch
from ..schemas.task import TaskCreate, TaskSummary
from ..search import predicates as p

# --- 1. CORE TASK FUNCTIONS ---

def create_task(session: Session, user_id: uuid.UUID, data: TaskCreate) -> Task:
    user = session.get(User, user_id)
    if user is None:
        raise NotFoundError("User", user_id)
    task = Task(user_id=user.id, **data.model_dump())
    return TaskRepository(session).add(task)


def get_task(session: Session, task_id: uuid.UUID) -> Task:
    return TaskRepository(session).fetch_by_id(task_id)


def list_tasks(session: Session, status: Optional[str] = None) -> List[Task]:
    predicate = p.has_status(status) if status else p.ALWAYS
    return TaskRepository(session).find_all(predicate)


def delete_task(session: Session, task_id: uuid.UUID) -> None:
    repo = TaskRepository(session)
    repo.delete(repo.fetch_by_id(task_id))


def delete_tasks(session: Session, task_ids: Iterable[uuid.UUID]) -> int:
    task_ids = list(task_ids)
    if not task_ids:
        return 0
    return TaskRepository(session).bulk_delete(p.FieldIn("id", tuple(task_ids)))


# --- 2. SEARCH ---

def search_tasks(session: Session, search: TaskSearch) -> List[Task]:
    return TaskRepository(session).find_all(p.build_task_predicate(search))


def search_tasks_paginated(session: Session, search: TaskSearch, pagination: Pagination) -> Page:
    return TaskRepository(session).find_page(p.build_task_predicate(search), pagination)


def tasks_by_status(session: Session, status: str) -> List[Task]:
    return TaskRepository(session).find_all(p.has_status(status))


def tasks_by_user(session: Session, user_id: uuid.UUID) -> List[Task]:
    return TaskRepository(session).find_all(p.belongs_to_user(user_id))


def tasks_by_user_and_status(session: Session, user_id: uuid.UUID, status: str) -> List[Task]:
    return TaskRepository(session).find_all(p.belongs_to_user(user_id) & p.has_status(status))


def tasks_by_keyword(session: Session, keyword: str) -> List[Task]:
    """Title-only, case-insensitive."""
    return TaskRepository(session).find_all(p.title_contains(keyword))


def tasks_by_keyword_and_status(session: Session, keyword: str, status: str) -> List[Task]:
    return TaskRepository(session).find_all(p.keyword_matches(keyword) & p.has_status(status))


def tasks_by_tag_name(session: Session, tag_name: str) -> List[Task]:
    return TaskRepository(session).find_all(p.has_tag(tag_name))


def tasks_by_username(session: Session, username: str) -> List[Task]:
    statement = select(Task).join(User).where(User.username == username)
    return list(session.exec(statement).all())


def tasks_created_after(session: Session, after: datetime) -> List[Task]:
    return TaskRepository(session).find_all(p.created_between(after, None))


def tasks_in_date_range(session: Session, start: Optional[datetime], end: Optional[datetime]) -> List[Task]:
    # Either bound may be open
    return TaskRepository(session).find_all(p.created_between(start, end))


def recent_tasks(session: Session, days: int) -> List[Task]:
    return tasks_created_after(session, utc_now() - timedelta(days=days))


def latest_task_for_user(session: Session, user_id: uuid.UUID) -> Optional[Task]:
    tasks = TaskRepository(session).find_all(p.belongs_to_user(user_id), newest_first=True, limit=1)
    return tasks[0] if tasks else None


def top_recent_by_status(session: Session, status: str, limit: int = 5) -> List[Task]:
    return TaskRepository(session).find_all(p.has_status(status), newest_first=True, limit=limit)


def task_exists_for_user(session: Session, title: str, user_id: uuid.UUID) -> bool:
    predicate = p.FieldEquals("title", title) & p.belongs_to_user(user_id)
    return TaskRepository(session).count_where(predicate) > 0


def task_summaries_for_user(session: Session, user_id: uuid.UUID) -> List[TaskSummary]:
    statement = (
        select(Task.id, Task.title, Task.status, User.username)
        .join(User)
        .where(Task.user_id == user_id)
        .order_by(Task.created_at)
    )
    return [
        TaskSummary(id=task_id, title=title, status=status, username=username)
        for task_id, title, status, username in session.exec(statement).all()
    ]


# --- 3. AGGREGATES ---

def count_by_status(session: Session, status: str) -> int:
    return TaskRepository(session).count_where(p.has_status(status))


def count_grouped_by_status(session: Session) -> Dict[str, int]:
    statement = select(Task.status, func.count(Task.id)).group_by(Task.status)
    return {status: count for status, count in session.exec(statement).all()}


def distinct_statuses(session: Session) -> List[str]:
    statement = select(Task.status).distinct().order_by(Task.status)
    return list(session.exec(statement).all())


# --- 4. BULK UPDATES / DELETES ---

def bulk_update_status(session: Session, old_status: str, new_status: str) -> int:
    return TaskRepository(session).bulk_update(p.has_status(old_status), {"status": new_status})


def update_task_status(session: Session, task_id: uuid.UUID, status: str) -> int:
    return TaskRepository(session).bulk_update(p.FieldEquals("id", task_id), {"status": status})


def delete_old_tasks(session: Session, days_old: int, status: str = "DONE") -> int:
    """Delete tasks in ``status`` created strictly before now minus ``days_old``."""
    cutoff = utc_now() - timedelta(days=days_old)
    predicate = p.has_status(status) & p.Not(p.created_between(cutoff, None))
    return TaskRepository(session).bulk_delete(predicate)


def delete_tasks_by_status(session: Session, status: str) -> int:
    return TaskRepository(session).bulk_delete(p.has_status(status))


# --- 5. TAG MEMBERSHIP ---

def add_tag_to_task(session: Session, task_id: uuid.UUID, tag_id: uuid.UUID) -> Task:
    task = get_task(session, task_id)
    tag = session.get(Tag, tag_id)
    if tag is None:
        raise NotFoundError("Tag", tag_id)
    if tag not in task.tags:
        task.tags.append(tag)
        session.commit()
        session.refresh(task)
    return task


def remove_tag_from_task(session: Session, task_id: uuid.UUID, tag_id: uuid.UUID) -> Task:
    task = get_task(session, task_id)
    tag = session.get(Tag, tag_id)
    if tag is None:
        raise NotFoundError("Tag", tag_id)
    if tag in task.tags:
        task.tags.remove(tag)
        session.commit()
        session.refresh(task)
    return task
