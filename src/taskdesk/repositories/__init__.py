"""Repository contracts and their storage backends."""

from __future__ import annotations

from .base import SQLRepository, TaskRepository, UserRepository
from .memory import InMemoryTaskRepository, InMemoryUserRepository
from .tasks import SQLTaskRepository
from .users import SQLUserRepository

__all__ = [
    "InMemoryTaskRepository",
    "InMemoryUserRepository",
    "SQLRepository",
    "SQLTaskRepository",
    "SQLUserRepository",
    "TaskRepository",
    "UserRepository",
]
