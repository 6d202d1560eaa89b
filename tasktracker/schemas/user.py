from sqlmodel import SQLModel, Field
from datetime import datetime
import uuid


class UserBase(SQLModel):
    username: str = Field(min_length=1, max_length=50)
    email: str = Field(min_length=3, max_length=100)


class UserCreate(UserBase):
    pass


class UserRead(UserBase):
    id: uuid.UUID
    created_at: datetime
