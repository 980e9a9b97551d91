"""Record types persisted by the service."""

from __future__ import annotations

from .task import Task, TaskBase
from .user import User, UserBase

__all__ = [
    "Task",
    "TaskBase",
    "User",
    "UserBase",
]
