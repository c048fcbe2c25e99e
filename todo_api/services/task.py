"""Task service - persistence for tasks."""

from collections.abc import Mapping
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from todo_api.core.logging import get_logger
from todo_api.models import Task
from todo_api.models.base import utcnow

logger = get_logger("task")

# Payload key -> column. Nullable fields can be cleared by sending null.
_UPDATABLE_FIELDS = {
    "title": "title",
    "description": "description",
    "completed": "completed",
    "categories": "categories",
}
_CLEARABLE_FIELDS = {
    "dueDate": "due_date",
    "priority": "priority",
}


class TaskService:
    """Service for managing tasks."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_for_list(self, list_id: str) -> list[Task]:
        """Get the tasks of a list, newest first."""
        result = await self.db.execute(
            select(Task).where(Task.list_id == list_id).order_by(Task.created_at.desc())
        )
        return list(result.scalars().all())

    async def get(self, task_id: str) -> Task | None:
        """Get a task by ID."""
        result = await self.db.execute(select(Task).where(Task.id == task_id))
        return result.scalar_one_or_none()

    async def create(self, list_id: str, data: Mapping[str, Any]) -> Task:
        """Create a task in a list from validated input."""
        task = Task(
            list_id=list_id,
            title=data["title"],
            description=data.get("description"),
            completed=data.get("completed") or False,
            due_date=data.get("dueDate"),
            priority=data.get("priority"),
            categories=data.get("categories"),
        )
        self.db.add(task)
        await self.db.flush()
        await self.db.refresh(task)
        return task

    async def update(self, task_id: str, data: Mapping[str, Any]) -> Task | None:
        """Apply the given fields. Returns None if the task is missing."""
        task = await self.get(task_id)
        if task is None:
            return None

        changed = False
        for key, column in _UPDATABLE_FIELDS.items():
            if data.get(key) is not None:
                setattr(task, column, data[key])
                changed = True
        for key, column in _CLEARABLE_FIELDS.items():
            if key in data:
                setattr(task, column, data[key])
                changed = True

        if changed:
            task.updated_at = utcnow()
            await self.db.flush()
            await self.db.refresh(task)
        return task

    async def delete(self, task_id: str) -> bool:
        """Delete a task."""
        task = await self.get(task_id)
        if task is None:
            return False

        await self.db.delete(task)
        await self.db.flush()
        logger.info("Task deleted", extra={"context": {"id": task_id}})
        return True
