from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field, Relationship
from typing import Optional, List
from datetime import datetime
import uuid

from .lifecycle import utc_now, DEFAULT_STATUS, DEFAULT_PRIORITY


class TaskTagLink(SQLModel, table=True):
    """Owning side of Task <-> Tag. Tag -> Task lookups go through this table."""

    __tablename__ = "task_tags"

    task_id: uuid.UUID = Field(foreign_key="tasks.id", primary_key=True)
    tag_id: uuid.UUID = Field(foreign_key="tags.id", primary_key=True, index=True)


class Task(SQLModel, table=True):
    __tablename__ = "tasks"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    user_id: uuid.UUID = Field(foreign_key="users.id", nullable=False, index=True)
    title: str = Field(nullable=False, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    status: str = Field(default=DEFAULT_STATUS, nullable=False, index=True)
    priority: str = Field(default=DEFAULT_PRIORITY, nullable=False)

    # Optimistic locking: every write is "UPDATE ... WHERE version = <read version>"
    version: int = Field(default=1, nullable=False)

    # Timezone-aware UTC; SQLite drops the offset and hands back naive UTC
    created_at: datetime = Field(
        default_factory=utc_now, nullable=False, index=True, sa_type=DateTime(timezone=True)
    )
    updated_at: datetime = Field(default_factory=utc_now, nullable=False, sa_type=DateTime(timezone=True))

    # Relationship to user
    user: Optional["User"] = Relationship(back_populates="tasks")

    # One-way: a Tag does not hold its tasks
    tags: List["Tag"] = Relationship(link_model=TaskTagLink)
