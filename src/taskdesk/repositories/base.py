"""Repository contracts and the shared SQL repository machinery."""

from __future__ import annotations

import logging
import re
from collections.abc import AsyncIterator, Mapping
from contextlib import asynccontextmanager
from typing import Any, ClassVar, Generic, Protocol, TypeVar, runtime_checkable

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from ..errors import ConstraintViolationError, NotFoundError, StoreFailureError
from ..models import Task, User

ModelType = TypeVar("ModelType", bound=SQLModel)

logger = logging.getLogger(__name__)

_UNIQUE_FAILURE_PATTERN = re.compile(r"UNIQUE constraint failed: (?P<columns>[\w.]+(?:, [\w.]+)*)")


@runtime_checkable
class TaskRepository(Protocol):
    """Operations every task storage backend must provide."""

    async def create(self, title: str, description: str) -> Task:  # pragma: no cover - interface definition
        """Insert a task with ``completed`` set to ``False`` and return it."""

    async def get(self, task_id: int) -> Task:  # pragma: no cover - interface definition
        """Return the task or raise ``NotFoundError``."""

    async def list(self) -> list[Task]:  # pragma: no cover - interface definition
        """Return every task, most recently created first."""

    async def update(
        self,
        task_id: int,
        *,
        title: str | None = None,
        description: str | None = None,
        completed: bool | None = None,
    ) -> Task:  # pragma: no cover - interface definition
        """Apply the provided fields only and return the resulting task."""

    async def delete(self, task_id: int) -> bool:  # pragma: no cover - interface definition
        """Remove the task, returning ``False`` when it did not exist."""


@runtime_checkable
class UserRepository(Protocol):
    """Operations every user storage backend must provide."""

    async def create(self, name: str, email: str) -> User:  # pragma: no cover - interface definition
        """Insert a user and return it; duplicate emails are a constraint violation."""

    async def get(self, user_id: int) -> User:  # pragma: no cover - interface definition
        """Return the user or raise ``NotFoundError``."""

    async def list(self) -> list[User]:  # pragma: no cover - interface definition
        """Return every user, most recently created first."""

    async def update(
        self,
        user_id: int,
        *,
        name: str | None = None,
        email: str | None = None,
    ) -> User:  # pragma: no cover - interface definition
        """Apply the provided fields only and return the resulting user."""

    async def delete(self, user_id: int) -> bool:  # pragma: no cover - interface definition
        """Remove the user, returning ``False`` when it did not exist."""


def collect_changes(field_names: tuple[str, ...], values: Mapping[str, Any]) -> dict[str, Any]:
    """Pick the fields that were actually supplied for a partial update.

    Only names from ``field_names`` are considered, so the resulting mapping
    can never introduce a column outside the entity's fixed field set.
    ``None`` marks an omitted field; none of the columns are nullable.
    """

    return {name: values[name] for name in field_names if values.get(name) is not None}


def violated_field(exc: IntegrityError) -> str | None:
    """Extract the column named by a SQLite uniqueness failure, if any."""

    match = _UNIQUE_FAILURE_PATTERN.search(str(exc.orig))
    if match is None:
        return None
    first_column = match.group("columns").split(", ")[0]
    return first_column.rsplit(".", 1)[-1]


class SQLRepository(Generic[ModelType]):
    """Provide session handling and error translation for SQL repositories."""

    entity_name: ClassVar[str]
    updatable_fields: ClassVar[tuple[str, ...]]

    def __init__(self, engine: AsyncEngine, model_type: type[ModelType]) -> None:
        self._engine = engine
        self._model_type = model_type
        self._session_factory = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @property
    def engine(self) -> AsyncEngine:
        """Return the engine (and therefore the pool) backing the repository."""
        return self._engine

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Yield a short-lived session, translating store errors on the way out."""
        try:
            async with self._session_factory() as session:
                yield session
        except IntegrityError as exc:
            field = violated_field(exc)
            logger.warning(
                "Store constraint violated",
                extra={"entity": self.entity_name, "field": field},
            )
            raise ConstraintViolationError(self.entity_name, field) from exc
        except SQLAlchemyError as exc:
            logger.error(
                "Store operation failed",
                extra={"entity": self.entity_name},
                exc_info=exc,
            )
            raise StoreFailureError() from exc

    async def _get(self, entity_id: int) -> ModelType:
        async with self.session() as session:
            instance = await session.get(self._model_type, entity_id)
        if instance is None:
            raise self._not_found(entity_id)
        return instance

    def _not_found(self, entity_id: int) -> NotFoundError:
        logger.debug(
            "Record not found",
            extra={"entity": self.entity_name, "entity_id": entity_id},
        )
        return NotFoundError(self.entity_name, entity_id)


__all__ = [
    "ModelType",
    "SQLRepository",
    "TaskRepository",
    "UserRepository",
    "collect_changes",
    "violated_field",
]
