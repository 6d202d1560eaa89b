from fastapi import Depends, Query
from sqlmodel import Session

from tasktracker.db.repository import TaskRepository
from tasktracker.db.session import get_session
from tasktracker.schemas.search import Pagination


def get_task_repository(session: Session = Depends(get_session)) -> TaskRepository:
    return TaskRepository(session)


def get_pagination(
    page: int = Query(0, ge=0),
    size: int = Query(10, ge=1, le=100),
    sort_by: str = Query("created_at"),
    direction: str = Query("DESC"),
) -> Pagination:
    return Pagination(page=page, size=size, sort_by=sort_by, direction=direction)
