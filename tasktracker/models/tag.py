from sqlmodel import SQLModel, Field
from typing import Optional
import uuid


class Tag(SQLModel, table=True):
    __tablename__ = "tags"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    name: str = Field(nullable=False, unique=True, index=True, max_length=50)
    color: Optional[str] = Field(default=None, max_length=7)  # Hex color #RRGGBB
