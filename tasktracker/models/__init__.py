# This file ensures all models are loaded together to resolve forward references
from .user import User
from .tag import Tag
from .task import Task, TaskTagLink

__all__ = ["User", "Tag", "Task", "TaskTagLink"]
