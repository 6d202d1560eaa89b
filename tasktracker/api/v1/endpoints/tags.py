from fastapi import APIRouter, Depends, status
from sqlmodel import Session
from typing import List
import uuid

from tasktracker.db.session import get_session
from tasktracker.schemas.tag import TagCreate, TagRead, TagUpdate
from tasktracker.services import tags as tag_service

router = APIRouter()

@router.post("/", response_model=TagRead, status_code=status.HTTP_201_CREATED)
def create_tag(tag_create: TagCreate, session: Session = Depends(get_session)):
    return tag_service.create_tag(session, tag_create)

@router.get("/", response_model=List[TagRead])
def list_tags(session: Session = Depends(get_session)):
    return tag_service.list_tags(session)

@router.get("/name/{name}", response_model=TagRead)
def get_tag_by_name(name: str, session: Session = Depends(get_session)):
    return tag_service.get_tag_by_name(session, name)

@router.get("/{tag_id}", response_model=TagRead)
def get_tag(tag_id: uuid.UUID, session: Session = Depends(get_session)):
    return tag_service.get_tag(session, tag_id)

@router.put("/{tag_id}", response_model=TagRead)
def update_tag(tag_id: uuid.UUID, tag_update: TagUpdate, session: Session = Depends(get_session)):
    return tag_service.update_tag(session, tag_id, tag_update)

@router.delete("/{tag_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_tag(tag_id: uuid.UUID, session: Session = Depends(get_session)):
    tag_service.delete_tag(session, tag_id)
