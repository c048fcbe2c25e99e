"""Task model."""

from typing import Any

from sqlalchemy import JSON, Boolean, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from todo_api.models.base import BaseModel


class Task(BaseModel):
    """A task belonging to exactly one list."""

    __tablename__ = "tasks"

    list_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("lists.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    completed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Kept exactly as submitted (ISO 8601 text)
    due_date: Mapped[str | None] = mapped_column(String(64), nullable=True)
    priority: Mapped[str | None] = mapped_column(String(16), nullable=True)
    categories: Mapped[list[Any] | None] = mapped_column(JSON, nullable=True)

    def __repr__(self) -> str:
        return f"<Task {self.title}>"
