"""Task record models built with SQLModel."""

from __future__ import annotations

import sqlalchemy as sa
from sqlmodel import Field, SQLModel


class TaskBase(SQLModel, table=False):
    """Shared attributes for task models."""

    title: str = Field(nullable=False, sa_type=sa.Text())
    description: str = Field(nullable=False, sa_type=sa.Text())
    completed: bool = Field(
        default=False,
        nullable=False,
        sa_column_kwargs={"server_default": sa.false()},
    )


class Task(TaskBase, table=True):
    """Persistent task model."""

    __tablename__ = "tasks"
    # AUTOINCREMENT keeps SQLite from handing out the id of a deleted row again.
    __table_args__ = {"sqlite_autoincrement": True}

    id: int | None = Field(default=None, primary_key=True)


__all__ = ["Task", "TaskBase"]
