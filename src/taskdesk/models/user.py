"""User record models built with SQLModel."""

from __future__ import annotations

import sqlalchemy as sa
from sqlmodel import Field, SQLModel


class UserBase(SQLModel, table=False):
    """Shared attributes for user models."""

    name: str = Field(nullable=False, sa_type=sa.Text())
    email: str = Field(nullable=False, unique=True, sa_type=sa.Text())


class User(UserBase, table=True):
    """Persistent user model."""

    __tablename__ = "users"
    __table_args__ = {"sqlite_autoincrement": True}

    id: int | None = Field(default=None, primary_key=True)


__all__ = ["User", "UserBase"]
