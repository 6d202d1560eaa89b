"""Tag request/response schemas."""

from typing import Annotated, Optional
import uuid

from pydantic import StringConstraints
from sqlmodel import SQLModel, Field

# Hex color pattern validation
HexColor = Annotated[str, StringConstraints(max_length=7, pattern=r"^#[0-9A-Fa-f]{6}$")]


class TagCreate(SQLModel):
    name: str = Field(min_length=1, max_length=50)
    color: Optional[HexColor] = None


class TagUpdate(SQLModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=50)
    color: Optional[HexColor] = None


class TagRead(SQLModel):
    id: uuid.UUID
    name: str
    color: Optional[str] = None
