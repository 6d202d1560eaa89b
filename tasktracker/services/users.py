import logging
from typing import List
import uuid

from sqlmodel import Session, select

from ..core.errors import NotFoundError
from ..db.repository import TaskRepository
from ..models import User
from ..models.lifecycle import mark_created, mark_deleted
from ..schemas.user import UserCreate
from ..search.predicates import belongs_to_user

logger = logging.getLogger(__name__)


def create_user(session: Session, data: UserCreate) -> User:
    user = User(username=data.username, email=data.email)
    mark_created(user)
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


def list_users(session: Session) -> List[User]:
    return list(session.exec(select(User).order_by(User.created_at)).all())


def get_user(session: Session, user_id: uuid.UUID) -> User:
    user = session.get(User, user_id)
    if user is None:
        raise NotFoundError("User", user_id)
    return user


def delete_user(session: Session, user_id: uuid.UUID) -> int:
    """Delete a user and every task they own. Returns the number of tasks removed."""
    user = get_user(session, user_id)
    removed = TaskRepository(session).bulk_delete(belongs_to_user(user.id), commit=False)
    # The bulk delete bypassed the ORM; drop any stale collection before deleting the parent
    session.expire(user, ["tasks"])
    mark_deleted(user)
    session.delete(user)
    session.commit()
    logger.info("User %s deleted with %d task(s)", user_id, removed)
    return removed
