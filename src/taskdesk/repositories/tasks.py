"""SQL repository for task records."""

from __future__ import annotations

import logging

from sqlalchemy import delete, insert, update
from sqlalchemy.ext.asyncio import AsyncEngine
from sqlmodel import select

from ..models import Task
from .base import SQLRepository, collect_changes

logger = logging.getLogger(__name__)


class SQLTaskRepository(SQLRepository[Task]):
    """Task repository issuing one parameterised statement per operation."""

    entity_name = "task"
    updatable_fields = ("title", "description", "completed")

    def __init__(self, engine: AsyncEngine) -> None:
        super().__init__(engine, Task)

    async def create(self, title: str, description: str) -> Task:
        """Insert a new task and return the stored row, id included."""
        statement = (
            insert(Task)
            .values(title=title, description=description, completed=False)
            .returning(Task)
        )
        async with self.session() as session:
            result = await session.execute(statement)
            task = result.scalar_one()
            await session.commit()
        logger.debug("Task created", extra={"task_id": task.id})
        return task

    async def get(self, task_id: int) -> Task:
        """Return the task identified by ``task_id``."""
        return await self._get(task_id)

    async def list(self) -> list[Task]:
        """Return all tasks ordered by id, newest first."""
        async with self.session() as session:
            result = await session.exec(select(Task).order_by(Task.id.desc()))  # type: ignore[union-attr]
            return list(result.all())

    async def update(
        self,
        task_id: int,
        *,
        title: str | None = None,
        description: str | None = None,
        completed: bool | None = None,
    ) -> Task:
        """Apply only the supplied fields and return the updated task.

        With no fields supplied nothing is written; the current row is read
        back instead.
        """
        changes = collect_changes(
            self.updatable_fields,
            {"title": title, "description": description, "completed": completed},
        )
        if not changes:
            return await self._get(task_id)

        statement = (
            update(Task)
            .where(Task.id == task_id)  # type: ignore[arg-type]
            .values(**changes)
            .returning(Task)
        )
        async with self.session() as session:
            result = await session.execute(statement)
            task = result.scalar_one_or_none()
            if task is None:
                raise self._not_found(task_id)
            await session.commit()
        logger.debug("Task updated", extra={"task_id": task_id, "fields": sorted(changes)})
        return task

    async def delete(self, task_id: int) -> bool:
        """Delete the task, returning whether a row was removed."""
        statement = delete(Task).where(Task.id == task_id)  # type: ignore[arg-type]
        async with self.session() as session:
            result = await session.execute(
                statement,
                execution_options={"synchronize_session": False},
            )
            deleted = result.rowcount > 0  # type: ignore[attr-defined]
            await session.commit()
        logger.debug("Task delete processed", extra={"task_id": task_id, "deleted": deleted})
        return deleted


__all__ = ["SQLTaskRepository"]
