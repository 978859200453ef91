"""Todo domain and request models."""

from datetime import UTC, datetime
from uuid import uuid4

from pydantic import BaseModel, Field, field_validator


def utc_now() -> datetime:
    """Return current UTC time."""
    return datetime.now(UTC)


class Todo(BaseModel):
    """A single todo item.

    Identity and creation time never change after creation; everything
    else may be overwritten by an update.
    """

    id: str = Field(default_factory=lambda: str(uuid4()), description="Opaque unique identifier")
    title: str = Field(..., description="Todo title")
    description: str | None = Field(default=None, description="Optional details")
    completed: bool = Field(default=False, description="Completion flag")
    created_at: datetime = Field(default_factory=utc_now, description="Creation timestamp")


class TodoCreate(BaseModel):
    """Request model for creating a todo."""

    title: str = Field(..., description="Todo title")
    description: str | None = Field(default=None, description="Optional details")


class TodoUpdate(BaseModel):
    """Request model for a partial todo update.

    Only fields present in the request are applied; ``model_dump(exclude_unset=True)``
    tells them apart from defaults.
    """

    title: str | None = Field(default=None)
    description: str | None = Field(default=None)
    completed: bool | None = Field(default=None)

    @field_validator("title", "completed")
    @classmethod
    def reject_null(cls, v: str | bool | None) -> str | bool:
        """Required todo fields may be omitted but not set to null."""
        if v is None:
            raise ValueError("may be omitted but not null")
        return v
