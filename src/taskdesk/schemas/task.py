"""Task-related Pydantic schemas."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

TASK_READ_EXAMPLE = {
    "id": 1,
    "title": "Learn Rust",
    "description": "Study tonic",
    "completed": False,
}


class TaskCreate(BaseModel):
    """Payload for creating a new task."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Learn Rust",
                "description": "Study tonic",
            }
        }
    )

    title: str
    description: str


class TaskUpdate(BaseModel):
    """Payload for partially updating an existing task.

    Omitted (or ``null``) fields keep their stored value. An empty payload is
    accepted and leaves the task untouched.
    """

    model_config = ConfigDict(
        json_schema_extra={"example": {"completed": True}},
    )

    title: str | None = Field(default=None)
    description: str | None = Field(default=None)
    completed: bool | None = Field(default=None)


class TaskRead(BaseModel):
    """Public representation of a task."""

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={"example": TASK_READ_EXAMPLE},
    )

    id: int
    title: str
    description: str
    completed: bool


__all__ = ["TaskCreate", "TaskRead", "TaskUpdate"]
