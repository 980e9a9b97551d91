"""Store initialisation and connection pool helpers."""

from __future__ import annotations

from .session import create_store_engine, init_db, is_memory_database
from .store import Store, open_store

__all__ = ["Store", "create_store_engine", "init_db", "is_memory_database", "open_store"]
