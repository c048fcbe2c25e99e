"""Pydantic schemas for the tasks API."""

from datetime import datetime
from typing import Any

from todo_api.schemas.common import CamelModel


class TaskResponse(CamelModel):
    """Schema for task response."""

    id: str
    list_id: str
    title: str
    description: str | None
    completed: bool
    due_date: str | None
    priority: str | None
    categories: list[Any] | None
    created_at: datetime
    updated_at: datetime | None
