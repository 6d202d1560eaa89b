import logging
from typing import List, Optional
import uuid

from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from ..core.errors import DuplicateNameError, NotFoundError
from ..models import Tag, Task, TaskTagLink
from ..models.lifecycle import mark_created, mark_deleted, mark_updated
from ..schemas.tag import TagCreate, TagUpdate

logger = logging.getLogger(__name__)


def _name_taken(session: Session, name: str, exclude_id: Optional[uuid.UUID] = None) -> bool:
    statement = select(Tag.id).where(Tag.name == name)
    if exclude_id is not None:
        statement = statement.where(Tag.id != exclude_id)
    return session.exec(statement).first() is not None


def _commit_unique(session: Session, tag: Tag) -> Tag:
    # The unique index still guards against a concurrent insert of the same name
    name = tag.name
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise DuplicateNameError(name)
    session.refresh(tag)
    return tag


def create_tag(session: Session, data: TagCreate) -> Tag:
    if _name_taken(session, data.name):
        raise DuplicateNameError(data.name)
    tag = Tag(name=data.name, color=data.color)
    mark_created(tag)
    session.add(tag)
    return _commit_unique(session, tag)


def list_tags(session: Session) -> List[Tag]:
    return list(session.exec(select(Tag).order_by(Tag.name)).all())


def get_tag(session: Session, tag_id: uuid.UUID) -> Tag:
    tag = session.get(Tag, tag_id)
    if tag is None:
        raise NotFoundError("Tag", tag_id)
    return tag


def get_tag_by_name(session: Session, name: str) -> Tag:
    tag = session.exec(select(Tag).where(Tag.name == name)).first()
    if tag is None:
        raise NotFoundError("Tag", name)
    return tag


def tags_for_task(session: Session, task_id: uuid.UUID) -> List[Tag]:
    if session.get(Task, task_id) is None:
        raise NotFoundError("Task", task_id)
    statement = (
        select(Tag)
        .join(TaskTagLink, TaskTagLink.tag_id == Tag.id)
        .where(TaskTagLink.task_id == task_id)
        .order_by(Tag.name)
    )
    return list(session.exec(statement).all())


def tags_for_user(session: Session, user_id: uuid.UUID) -> List[Tag]:
    """Distinct tags attached to any task owned by ``user_id``."""
    statement = (
        select(Tag)
        .join(TaskTagLink, TaskTagLink.tag_id == Tag.id)
        .join(Task, Task.id == TaskTagLink.task_id)
        .where(Task.user_id == user_id)
        .distinct()
        .order_by(Tag.name)
    )
    return list(session.exec(statement).all())


def task_ids_for_tag(session: Session, tag_id: uuid.UUID) -> List[uuid.UUID]:
    statement = select(TaskTagLink.task_id).where(TaskTagLink.tag_id == tag_id)
    return list(session.exec(statement).all())


def update_tag(session: Session, tag_id: uuid.UUID, data: TagUpdate) -> Tag:
    tag = get_tag(session, tag_id)
    changes = data.model_dump(exclude_unset=True)
    # A tag always keeps a name; only the color may be cleared
    changes = {key: value for key, value in changes.items() if value is not None or key == "color"}
    new_name = changes.get("name")
    if new_name is not None and new_name != tag.name and _name_taken(session, new_name, exclude_id=tag.id):
        raise DuplicateNameError(new_name)
    for key, value in changes.items():
        setattr(tag, key, value)
    mark_updated(tag)
    session.add(tag)
    return _commit_unique(session, tag)


def delete_tag(session: Session, tag_id: uuid.UUID) -> List[uuid.UUID]:
    """Delete a tag, detaching it from every task first. Returns the ids of those tasks."""
    tag = get_tag(session, tag_id)
    detached = task_ids_for_tag(session, tag.id)
    session.execute(delete(TaskTagLink).where(TaskTagLink.tag_id == tag.id))
    logger.info("Tag %s removed from %d task(s)", tag.name, len(detached))
    mark_deleted(tag)
    session.delete(tag)
    session.commit()
    return detached
