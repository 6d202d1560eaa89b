from sqlmodel import SQLModel, Field
from typing import Optional, List, Dict
from datetime import datetime
import uuid

from .tag import TagRead


class TaskBase(SQLModel):
    title: str = Field(min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    status: str = "TODO"
    priority: str = "MEDIUM"

class TaskCreate(TaskBase):
    pass

class TaskRead(TaskBase):
    id: uuid.UUID
    user_id: uuid.UUID
    version: int
    created_at: datetime
    updated_at: datetime

class TaskReadWithTags(TaskRead):
    tags: List[TagRead] = []

class TaskUpdate(SQLModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    status: Optional[str] = None
    priority: Optional[str] = None
    # Expected version for PUT /tasks/{id}; ignored by the retrying endpoint
    version: Optional[int] = None

    def changes(self) -> Dict[str, object]:
        data = self.model_dump(exclude_unset=True, exclude={"version"})
        # Only description may be cleared
        return {key: value for key, value in data.items() if value is not None or key == "description"}

class TaskStatusUpdate(SQLModel):
    status: str

class BulkStatusUpdate(SQLModel):
    old_status: str
    new_status: str

class TaskSummary(SQLModel):
    id: uuid.UUID
    title: str
    status: str
    username: str

class AffectedRows(SQLModel):
    affected: int
