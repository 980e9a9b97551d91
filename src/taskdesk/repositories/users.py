"""SQL repository for user records."""

from __future__ import annotations

import logging

from sqlalchemy import delete, insert, update
from sqlalchemy.ext.asyncio import AsyncEngine
from sqlmodel import select

from ..models import User
from .base import SQLRepository, collect_changes

logger = logging.getLogger(__name__)


class SQLUserRepository(SQLRepository[User]):
    """User repository; email uniqueness is enforced by the store itself."""

    entity_name = "user"
    updatable_fields = ("name", "email")

    def __init__(self, engine: AsyncEngine) -> None:
        super().__init__(engine, User)

    async def create(self, name: str, email: str) -> User:
        """Insert a new user and return the stored row, id included."""
        statement = insert(User).values(name=name, email=email).returning(User)
        async with self.session() as session:
            result = await session.execute(statement)
            user = result.scalar_one()
            await session.commit()
        logger.debug("User created", extra={"user_id": user.id})
        return user

    async def get(self, user_id: int) -> User:
        return await self._get(user_id)

    async def list(self) -> list[User]:
        async with self.session() as session:
            result = await session.exec(select(User).order_by(User.id.desc()))  # type: ignore[union-attr]
            return list(result.all())

    async def update(
        self,
        user_id: int,
        *,
        name: str | None = None,
        email: str | None = None,
    ) -> User:
        """Apply only the supplied fields and return the updated user."""
        changes = collect_changes(self.updatable_fields, {"name": name, "email": email})
        if not changes:
            return await self._get(user_id)

        statement = (
            update(User)
            .where(User.id == user_id)  # type: ignore[arg-type]
            .values(**changes)
            .returning(User)
        )
        async with self.session() as session:
            result = await session.execute(statement)
            user = result.scalar_one_or_none()
            if user is None:
                raise self._not_found(user_id)
            await session.commit()
        logger.debug("User updated", extra={"user_id": user_id, "fields": sorted(changes)})
        return user

    async def delete(self, user_id: int) -> bool:
        statement = delete(User).where(User.id == user_id)  # type: ignore[arg-type]
        async with self.session() as session:
            result = await session.execute(
                statement,
                execution_options={"synchronize_session": False},
            )
            deleted = result.rowcount > 0  # type: ignore[attr-defined]
            await session.commit()
        logger.debug("User delete processed", extra={"user_id": user_id, "deleted": deleted})
        return deleted


__all__ = ["SQLUserRepository"]
