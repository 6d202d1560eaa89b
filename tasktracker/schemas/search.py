from sqlmodel import SQLModel, Field
from typing import Optional, List
from datetime import datetime
import uuid

from .task import TaskRead


class TaskSearch(SQLModel):
    """Ad-hoc search; every field is optional and unset fields are ignored."""

    status: Optional[str] = None
    priority: Optional[str] = None
    user_id: Optional[uuid.UUID] = None
    keyword: Optional[str] = None
    tag_name: Optional[str] = None
    created_after: Optional[datetime] = None
    created_before: Optional[datetime] = None


class Pagination(SQLModel):
    page: int = Field(default=0, ge=0)
    size: int = Field(default=10, ge=1, le=100)
    sort_by: str = "created_at"
    # Anything other than "ASC" (any case) sorts descending
    direction: str = "DESC"

    @property
    def ascending(self) -> bool:
        return self.direction.upper() == "ASC"


class TaskPageRead(SQLModel):
    items: List[TaskRead]
    total: int
    page: int
    size: int
    total_pages: int
