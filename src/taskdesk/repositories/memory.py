"""In-memory repositories used as drop-in substitutes in tests."""

from __future__ import annotations

import asyncio
from itertools import count
from typing import Any, ClassVar, Generic

from ..errors import ConstraintViolationError, NotFoundError
from ..models import Task, User
from .base import ModelType, collect_changes


class InMemoryRepository(Generic[ModelType]):
    """Keep rows as plain dicts and hand out fresh model instances."""

    entity_name: ClassVar[str]
    updatable_fields: ClassVar[tuple[str, ...]]
    unique_fields: ClassVar[tuple[str, ...]] = ()

    def __init__(self, model_type: type[ModelType]) -> None:
        self._model_type = model_type
        self._rows: dict[int, dict[str, Any]] = {}
        self._ids = count(1)
        self._lock = asyncio.Lock()

    def _build(self, row: dict[str, Any]) -> ModelType:
        return self._model_type(**row)

    def _check_unique(self, values: dict[str, Any], *, exclude_id: int | None = None) -> None:
        for field in self.unique_fields:
            if field not in values:
                continue
            for row_id, row in self._rows.items():
                if row_id != exclude_id and row[field] == values[field]:
                    raise ConstraintViolationError(self.entity_name, field)

    async def _insert(self, values: dict[str, Any]) -> ModelType:
        async with self._lock:
            self._check_unique(values)
            row = {"id": next(self._ids), **values}
            self._rows[row["id"]] = row
            return self._build(row)

    async def get(self, entity_id: int) -> ModelType:
        async with self._lock:
            row = self._rows.get(entity_id)
            if row is None:
                raise NotFoundError(self.entity_name, entity_id)
            return self._build(row)

    async def list(self) -> list[ModelType]:
        async with self._lock:
            return [self._build(self._rows[row_id]) for row_id in sorted(self._rows, reverse=True)]

    async def _update(self, entity_id: int, values: dict[str, Any]) -> ModelType:
        changes = collect_changes(self.updatable_fields, values)
        async with self._lock:
            row = self._rows.get(entity_id)
            if row is None:
                raise NotFoundError(self.entity_name, entity_id)
            self._check_unique(changes, exclude_id=entity_id)
            row.update(changes)
            return self._build(row)

    async def delete(self, entity_id: int) -> bool:
        async with self._lock:
            return self._rows.pop(entity_id, None) is not None


class InMemoryTaskRepository(InMemoryRepository[Task]):
    entity_name = "task"
    updatable_fields = ("title", "description", "completed")

    def __init__(self) -> None:
        super().__init__(Task)

    async def create(self, title: str, description: str) -> Task:
        return await self._insert({"title": title, "description": description, "completed": False})

    async def update(
        self,
        task_id: int,
        *,
        title: str | None = None,
        description: str | None = None,
        completed: bool | None = None,
    ) -> Task:
        return await self._update(
            task_id,
            {"title": title, "description": description, "completed": completed},
        )


class InMemoryUserRepository(InMemoryRepository[User]):
    entity_name = "user"
    updatable_fields = ("name", "email")
    unique_fields = ("email",)

    def __init__(self) -> None:
        super().__init__(User)

    async def create(self, name: str, email: str) -> User:
        return await self._insert({"name": name, "email": email})

    async def update(
        self,
        user_id: int,
        *,
        name: str | None = None,
        email: str | None = None,
    ) -> User:
        return await self._update(user_id, {"name": name, "email": email})


__all__ = ["InMemoryRepository", "InMemoryTaskRepository", "InMemoryUserRepository"]
