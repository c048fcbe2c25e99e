"""Pydantic schemas for the lists API."""

from datetime import datetime

from todo_api.schemas.common import CamelModel


class TodoListResponse(CamelModel):
    """Schema for list response."""

    id: str
    name: str
    description: str | None
    created_at: datetime
    updated_at: datetime | None
