from fastapi import APIRouter, Body, Depends, Query, status
from sqlmodel import Session
from typing import Dict, List, Optional
from datetime import datetime
import uuid

from tasktracker.api.deps import get_pagination, get_task_repository
from tasktracker.core.errors import ValidationError
from tasktracker.db.repository import TaskRepository
from tasktracker.db.session import get_session
from tasktracker.schemas.search import Pagination, TaskPageRead, TaskSearch
from tasktracker.schemas.tag import TagRead
from tasktracker.schemas.task import (
    AffectedRows,
    BulkStatusUpdate,
    TaskCreate,
    TaskRead,
    TaskReadWithTags,
    TaskStatusUpdate,
    TaskUpdate,
)
from tasktracker.services import concurrency, tags as tag_service, tasks as task_service

router = APIRouter()

# --- SEARCH ---

@router.post("/search", response_model=List[TaskRead])
def search_tasks(search: TaskSearch, session: Session = Depends(get_session)):
    return task_service.search_tasks(session, search)

@router.post("/search/paginated", response_model=TaskPageRead)
def search_tasks_paginated(
    search: TaskSearch,
    pagination: Pagination = Depends(get_pagination),
    session: Session = Depends(get_session)
):
    page = task_service.search_tasks_paginated(session, search, pagination)
    return TaskPageRead(
        items=[TaskRead.model_validate(task) for task in page.items],
        total=page.total,
        page=page.page,
        size=page.size,
        total_pages=page.total_pages
    )

# --- STATS ---

@router.get("/stats/status-counts", response_model=Dict[str, int])
def get_status_counts(session: Session = Depends(get_session)):
    return task_service.count_grouped_by_status(session)

@router.get("/stats/statuses", response_model=List[str])
def get_distinct_statuses(session: Session = Depends(get_session)):
    return task_service.distinct_statuses(session)

@router.get("/stats/count", response_model=int)
def count_tasks_by_status(task_status: str = Query(..., alias="status"), session: Session = Depends(get_session)):
    return task_service.count_by_status(session, task_status)

@router.get("/recent", response_model=List[TaskRead])
def get_recent_tasks_by_status(
    task_status: str = Query(..., alias="status"),
    limit: int = Query(5, ge=1, le=100),
    session: Session = Depends(get_session)
):
    return task_service.top_recent_by_status(session, task_status, limit)

@router.get("/created", response_model=List[TaskRead])
def get_tasks_by_creation_date(
    days: Optional[int] = Query(None, ge=0),
    after: Optional[datetime] = None,
    before: Optional[datetime] = None,
    session: Session = Depends(get_session)
):
    if days is not None:
        return task_service.recent_tasks(session, days)
    if after is None and before is None:
        raise ValidationError("Pass 'days' or at least one of 'after' and 'before'")
    return task_service.tasks_in_date_range(session, after, before)

@router.get("/by-tag/{tag_name}", response_model=List[TaskRead])
def get_tasks_by_tag_name(tag_name: str, session: Session = Depends(get_session)):
    return task_service.tasks_by_tag_name(session, tag_name)

# --- BULK OPERATIONS ---

@router.patch("/bulk/status", response_model=AffectedRows)
def bulk_update_status(update: BulkStatusUpdate, session: Session = Depends(get_session)):
    affected = task_service.bulk_update_status(session, update.old_status, update.new_status)
    return AffectedRows(affected=affected)

@router.delete("/old", response_model=AffectedRows)
def delete_old_tasks(
    days_old: int = Query(..., ge=0),
    task_status: str = Query("DONE", alias="status"),
    session: Session = Depends(get_session)
):
    return AffectedRows(affected=task_service.delete_old_tasks(session, days_old, task_status))

@router.delete("/batch", response_model=AffectedRows)
def delete_multiple_tasks(task_ids: List[uuid.UUID] = Body(...), session: Session = Depends(get_session)):
    return AffectedRows(affected=task_service.delete_tasks(session, task_ids))

# --- CRUD ---

@router.get("/", response_model=List[TaskRead])
def list_tasks(
    task_status: Optional[str] = Query(None, alias="status"),
    keyword: Optional[str] = None,
    session: Session = Depends(get_session)
):
    if keyword is not None and task_status is not None:
        return task_service.tasks_by_keyword_and_status(session, keyword, task_status)
    if keyword is not None:
        return task_service.tasks_by_keyword(session, keyword)
    return task_service.list_tasks(session, task_status)

@router.post("/user/{user_id}", response_model=TaskRead, status_code=status.HTTP_201_CREATED)
def create_task(user_id: uuid.UUID, task_create: TaskCreate, session: Session = Depends(get_session)):
    return task_service.create_task(session, user_id, task_create)

@router.get("/{task_id}", response_model=TaskReadWithTags)
def get_task(task_id: uuid.UUID, session: Session = Depends(get_session)):
    return TaskReadWithTags.model_validate(task_service.get_task(session, task_id))

# Single attempt; a stale "version" in the body is rejected with 409
@router.put("/{task_id}", response_model=TaskRead)
def update_task(
    task_id: uuid.UUID,
    task_update: TaskUpdate,
    repo: TaskRepository = Depends(get_task_repository)
):
    return concurrency.update_task(repo, task_id, task_update.changes(), expected_version=task_update.version)

@router.put("/{task_id}/retry", response_model=TaskRead)
def update_task_with_retry(
    task_id: uuid.UUID,
    task_update: TaskUpdate,
    max_retries: Optional[int] = Query(None, ge=1),
    repo: TaskRepository = Depends(get_task_repository)
):
    return concurrency.update_task_with_retry(repo, task_id, task_update.changes(), max_retries)

@router.patch("/{task_id}/status", response_model=AffectedRows)
def update_task_status(task_id: uuid.UUID, update: TaskStatusUpdate, session: Session = Depends(get_session)):
    task_service.get_task(session, task_id)
    return AffectedRows(affected=task_service.update_task_status(session, task_id, update.status))

@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_task(task_id: uuid.UUID, session: Session = Depends(get_session)):
    task_service.delete_task(session, task_id)

# --- TAGS ON A TASK ---

@router.get("/{task_id}/tags", response_model=List[TagRead])
def get_task_tags(task_id: uuid.UUID, session: Session = Depends(get_session)):
    return tag_service.tags_for_task(session, task_id)

@router.post("/{task_id}/tags/{tag_id}", response_model=TaskReadWithTags)
def add_tag_to_task(task_id: uuid.UUID, tag_id: uuid.UUID, session: Session = Depends(get_session)):
    return TaskReadWithTags.model_validate(task_service.add_tag_to_task(session, task_id, tag_id))

@router.delete("/{task_id}/tags/{tag_id}", response_model=TaskReadWithTags)
def remove_tag_from_task(task_id: uuid.UUID, tag_id: uuid.UUID, session: Session = Depends(get_session)):
    return TaskReadWithTags.model_validate(task_service.remove_tag_from_task(session, task_id, tag_id))
