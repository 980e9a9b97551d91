"""Repository error taxonomy shared by every storage backend and front-end.

Repositories raise only the exceptions defined here. Each carries an
``ErrorKind`` which the HTTP and RPC adapters translate through their own
mapping tables, so both transports classify failures identically.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Transport-neutral classes of request failures."""

    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    INVALID = "invalid"
    INTERNAL = "internal"


class RepositoryError(Exception):
    """Base class for failures raised across the repository boundary."""

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class NotFoundError(RepositoryError):
    """The requested record does not exist."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, entity: str, entity_id: int) -> None:
        super().__init__(f"{entity.capitalize()} with id {entity_id} not found.")
        self.entity = entity
        self.entity_id = entity_id


class ConstraintViolationError(RepositoryError):
    """A uniqueness or other declared constraint would be violated."""

    kind = ErrorKind.CONFLICT

    def __init__(self, entity: str, field: str | None = None) -> None:
        if field:
            message = f"{entity.capitalize()} with this {field} already exists."
            details: dict[str, Any] | None = {"field": field}
        else:
            message = f"{entity.capitalize()} violates a store constraint."
            details = None
        super().__init__(message, details=details)
        self.entity = entity
        self.field = field


class StoreFailureError(RepositoryError):
    """Any other store-level failure.

    The message is generic; the underlying store error is chained as
    ``__cause__`` and logged, never shown to callers.
    """

    kind = ErrorKind.INTERNAL

    def __init__(self, message: str = "Internal server error.") -> None:
        super().__init__(message)


class StoreInitializationError(Exception):
    """The store could not be opened or its schema could not be created."""


__all__ = [
    "ConstraintViolationError",
    "ErrorKind",
    "NotFoundError",
    "RepositoryError",
    "StoreFailureError",
    "StoreInitializationError",
]
