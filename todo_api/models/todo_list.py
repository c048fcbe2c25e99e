"""Todo list model."""

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from todo_api.models.base import BaseModel


class TodoList(BaseModel):
    """A named list of tasks. Deleting a list deletes its tasks."""

    __tablename__ = "lists"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<TodoList {self.name}>"
