"""Connection pool and schema management utilities."""

from __future__ import annotations

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import AsyncAdaptedQueuePool, StaticPool
from sqlmodel import SQLModel

from .. import models  # noqa: F401  - registers both tables on the metadata
from ..core.config import Settings


def is_memory_database(database_url: str) -> bool:
    """Return ``True`` when the URL points at a transient in-memory SQLite store."""

    database = make_url(database_url).database
    return database in (None, "", ":memory:")


def create_store_engine(settings: Settings) -> AsyncEngine:
    """Create the single engine whose pool is shared by every repository.

    File stores get a queue pool capped at ``db_pool_size`` connections with
    no overflow. An in-memory store only exists for the lifetime of one
    connection, so it is served from a single shared connection instead.
    """

    if is_memory_database(settings.database_url):
        return create_async_engine(
            settings.database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_async_engine(
        settings.database_url,
        poolclass=AsyncAdaptedQueuePool,
        pool_size=settings.db_pool_size,
        max_overflow=0,
        pool_timeout=settings.db_pool_timeout,
    )


async def init_db(engine: AsyncEngine) -> None:
    """Create the ``tasks`` and ``users`` tables if they do not exist yet."""

    async with engine.begin() as connection:
        await connection.run_sync(SQLModel.metadata.create_all)


__all__ = ["create_store_engine", "init_db", "is_memory_database"]
