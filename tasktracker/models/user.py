from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field, Relationship
from typing import List
from datetime import datetime
import uuid

from .lifecycle import utc_now


class User(SQLModel, table=True):
    __tablename__ = "users"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    username: str = Field(nullable=False, max_length=50, index=True)
    email: str = Field(nullable=False, max_length=100)
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))

    # Relationship to tasks; removal is done explicitly by the user service
    tasks: List["Task"] = Relationship(back_populates="user")
