"""Process-wide store handle shared by both protocol front-ends."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from ..core.config import Settings
from ..errors import StoreInitializationError
from ..repositories import SQLTaskRepository, SQLUserRepository
from .session import create_store_engine, init_db

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class Store:
    """An initialised engine together with the repositories bound to it."""

    engine: AsyncEngine
    tasks: SQLTaskRepository
    users: SQLUserRepository
    _closed: bool = field(default=False, init=False, repr=False)

    @classmethod
    def from_engine(cls, engine: AsyncEngine) -> "Store":
        return cls(
            engine=engine,
            tasks=SQLTaskRepository(engine),
            users=SQLUserRepository(engine),
        )

    @property
    def closed(self) -> bool:
        return self._closed

    async def close(self) -> None:
        """Dispose the connection pool. Subsequent calls are no-ops."""
        if self._closed:
            return
        self._closed = True
        await self.engine.dispose()
        logger.info("Store closed")


async def open_store(settings: Settings) -> Store:
    """Open the pool, create the schema and bind both repositories to it.

    Any failure here is a startup precondition failure and is reported as
    ``StoreInitializationError``; it is never retried.
    """

    engine: AsyncEngine | None = None
    try:
        engine = create_store_engine(settings)
        await init_db(engine)
    except (SQLAlchemyError, OSError, ValueError) as exc:
        if engine is not None:
            await engine.dispose()
        logger.critical(
            "Unable to initialise store",
            extra={"database_url": settings.database_url},
            exc_info=exc,
        )
        raise StoreInitializationError(
            f"Unable to initialise store at {settings.database_url!r}."
        ) from exc

    logger.info(
        "Store initialised",
        extra={"database_url": settings.database_url, "pool_size": settings.db_pool_size},
    )
    return Store.from_engine(engine)


__all__ = ["Store", "open_store"]
