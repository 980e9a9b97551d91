"""User-facing Pydantic schemas."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class UserCreate(BaseModel):
    """Payload for creating a new user."""

    model_config = ConfigDict(
        json_schema_extra={"example": {"name": "John", "email": "john@example.com"}},
    )

    name: str
    email: str


class UserUpdate(BaseModel):
    """Payload for partially updating an existing user."""

    name: str | None = Field(default=None)
    email: str | None = Field(default=None)


class UserRead(BaseModel):
    """Public representation of a user."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str


__all__ = ["UserCreate", "UserRead", "UserUpdate"]
