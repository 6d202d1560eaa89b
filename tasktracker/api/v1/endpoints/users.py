from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session
from typing import List, Optional
import uuid

from tasktracker.db.session import get_session
from tasktracker.schemas.tag import TagRead
from tasktracker.schemas.task import TaskRead, TaskSummary
from tasktracker.schemas.user import UserCreate, UserRead
from tasktracker.services import tags as tag_service, tasks as task_service, users as user_service

router = APIRouter()

@router.post("/", response_model=UserRead, status_code=status.HTTP_201_CREATED)
def create_user(user_create: UserCreate, session: Session = Depends(get_session)):
    return user_service.create_user(session, user_create)

@router.get("/", response_model=List[UserRead])
def list_users(session: Session = Depends(get_session)):
    return user_service.list_users(session)

@router.get("/{user_id}", response_model=UserRead)
def get_user(user_id: uuid.UUID, session: Session = Depends(get_session)):
    return user_service.get_user(session, user_id)

@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(user_id: uuid.UUID, session: Session = Depends(get_session)):
    user_service.delete_user(session, user_id)

# --- TASKS OWNED BY A USER ---

@router.get("/{user_id}/tasks", response_model=List[TaskRead])
def list_user_tasks(
    user_id: uuid.UUID,
    task_status: Optional[str] = Query(None, alias="status"),
    session: Session = Depends(get_session)
):
    user_service.get_user(session, user_id)
    if task_status is not None:
        return task_service.tasks_by_user_and_status(session, user_id, task_status)
    return task_service.tasks_by_user(session, user_id)

@router.get("/{user_id}/tasks/latest", response_model=Optional[TaskRead])
def get_latest_user_task(user_id: uuid.UUID, session: Session = Depends(get_session)):
    user_service.get_user(session, user_id)
    return task_service.latest_task_for_user(session, user_id)

@router.get("/{user_id}/tasks/summary", response_model=List[TaskSummary])
def list_user_task_summaries(user_id: uuid.UUID, session: Session = Depends(get_session)):
    user_service.get_user(session, user_id)
    return task_service.task_summaries_for_user(session, user_id)

@router.get("/{user_id}/tasks/exists", response_model=bool)
def user_task_exists(user_id: uuid.UUID, title: str, session: Session = Depends(get_session)):
    return task_service.task_exists_for_user(session, title, user_id)

@router.get("/{user_id}/tags", response_model=List[TagRead])
def list_user_tags(user_id: uuid.UUID, session: Session = Depends(get_session)):
    user_service.get_user(session, user_id)
    return tag_service.tags_for_user(session, user_id)

@router.get("/by-username/{username}/tasks", response_model=List[TaskRead])
def list_tasks_by_username(username: str, session: Session = Depends(get_session)):
    return task_service.tasks_by_username(session, username)
