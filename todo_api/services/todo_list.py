"""Todo list service - persistence for lists."""

from collections.abc import Mapping
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from todo_api.core.logging import get_logger
from todo_api.models import TodoList
from todo_api.models.base import utcnow

logger = get_logger("todo_list")


class TodoListService:
    """Service for managing todo lists."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_all(self) -> list[TodoList]:
        """Get all lists, newest first."""
        result = await self.db.execute(select(TodoList).order_by(TodoList.created_at.desc()))
        return list(result.scalars().all())

    async def get(self, list_id: str) -> TodoList | None:
        """Get a list by ID."""
        result = await self.db.execute(select(TodoList).where(TodoList.id == list_id))
        return result.scalar_one_or_none()

    async def create(self, data: Mapping[str, Any]) -> TodoList:
        """Create a list from validated input."""
        todo_list = TodoList(name=data["name"], description=data.get("description"))
        self.db.add(todo_list)
        await self.db.flush()
        await self.db.refresh(todo_list)
        return todo_list

    async def update(self, list_id: str, data: Mapping[str, Any]) -> TodoList | None:
        """Apply the non-null fields of ``data``. Returns None if the list is missing."""
        todo_list = await self.get(list_id)
        if todo_list is None:
            return None

        changed = False
        for field in ("name", "description"):
            if data.get(field) is not None:
                setattr(todo_list, field, data[field])
                changed = True

        if changed:
            todo_list.updated_at = utcnow()
            await self.db.flush()
            await self.db.refresh(todo_list)
        return todo_list

    async def delete(self, list_id: str) -> bool:
        """Delete a list and, through the foreign key cascade, its tasks."""
        todo_list = await self.get(list_id)
        if todo_list is None:
            return False

        await self.db.delete(todo_list)
        await self.db.flush()
        logger.info("List deleted", extra={"context": {"id": list_id}})
        return True
