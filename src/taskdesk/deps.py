"""Reusable FastAPI dependencies."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from .repositories import TaskRepository, UserRepository


def _bound_repository(request: Request, attribute: str):
    repository = getattr(request.app.state, attribute, None)
    if repository is None:
        raise RuntimeError("Repositories are not bound; the store has not been opened.")
    return repository


def get_task_repository(request: Request) -> TaskRepository:
    """Return the task repository bound to the running application."""

    return _bound_repository(request, "task_repository")


def get_user_repository(request: Request) -> UserRepository:
    """Return the user repository bound to the running application."""

    return _bound_repository(request, "user_repository")


TaskRepositoryDependency = Annotated[TaskRepository, Depends(get_task_repository)]
UserRepositoryDependency = Annotated[UserRepository, Depends(get_user_repository)]


__all__ = [
    "TaskRepositoryDependency",
    "UserRepositoryDependency",
    "get_task_repository",
    "get_user_repository",
]
