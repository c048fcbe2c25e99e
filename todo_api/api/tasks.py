"""Tasks API handlers."""

from typing import Any

from starlette.requests import Request

from todo_api.api.common import (
    only_present,
    payload,
    require_any_field,
    require_uuid,
    sanitize_fields,
    validate_or_raise,
)
from todo_api.core.database import Database
from todo_api.core.dispatcher import ApiResponse
from todo_api.core.errors import NotFoundError
from todo_api.core.validation import Rule
from todo_api.schemas import TaskResponse
from todo_api.services.task import TaskService
from todo_api.services.todo_list import TodoListService

TASK_FIELDS = ("title", "description", "completed", "dueDate", "priority", "categories")
SANITIZED_TASK_FIELDS = ("title", "description", "categories")
PRIORITIES = ("low", "medium", "high")

UPDATE_TASK_RULES = {
    "title": [Rule.string(), Rule.max_length(255), Rule.not_empty()],
    "description": [Rule.string(), Rule.max_length(2000)],
    "completed": [Rule.boolean()],
    "dueDate": [Rule.iso_datetime()],
    "priority": [Rule.enum(PRIORITIES)],
    "categories": [Rule.array(), Rule.max_items(10), Rule.array_item_max_length(50)],
}

CREATE_TASK_RULES = {
    **UPDATE_TASK_RULES,
    "title": [Rule.required(), *UPDATE_TASK_RULES["title"]],
}


class TaskHandlers:
    """Handlers for ``/lists/:listId/tasks`` and ``/tasks/:id``."""

    def __init__(self, database: Database):
        self.database = database

    async def list_for_list(self, request: Request, params: dict[str, str]) -> list[dict[str, Any]]:
        list_id = require_uuid(params["listId"], "list ID")
        async with self.database.session() as db:
            if await TodoListService(db).get(list_id) is None:
                raise NotFoundError("List not found")
            tasks = await TaskService(db).list_for_list(list_id)
        return [TaskResponse.model_validate(task).to_json() for task in tasks]

    async def get(self, request: Request, params: dict[str, str]) -> dict[str, Any]:
        task_id = require_uuid(params["id"], "task ID")
        async with self.database.session() as db:
            task = await TaskService(db).get(task_id)
        if task is None:
            raise NotFoundError("Task not found")
        return TaskResponse.model_validate(task).to_json()

    async def create(self, request: Request, params: dict[str, str]) -> ApiResponse:
        list_id = require_uuid(params["listId"], "list ID")
        data = sanitize_fields(payload(request), SANITIZED_TASK_FIELDS)
        validate_or_raise(data, CREATE_TASK_RULES)

        async with self.database.session() as db:
            if await TodoListService(db).get(list_id) is None:
                raise NotFoundError("List not found")
            task = await TaskService(db).create(list_id, data)
        return ApiResponse.created(TaskResponse.model_validate(task).to_json())

    async def update(self, request: Request, params: dict[str, str]) -> dict[str, Any]:
        task_id = require_uuid(params["id"], "task ID")
        data = sanitize_fields(payload(request), SANITIZED_TASK_FIELDS)
        require_any_field(data, TASK_FIELDS)
        validate_or_raise(data, only_present(UPDATE_TASK_RULES, data))

        async with self.database.session() as db:
            task = await TaskService(db).update(task_id, data)
        if task is None:
            raise NotFoundError("Task not found")
        return TaskResponse.model_validate(task).to_json()

    async def delete(self, request: Request, params: dict[str, str]) -> ApiResponse:
        task_id = require_uuid(params["id"], "task ID")
        async with self.database.session() as db:
            deleted = await TaskService(db).delete(task_id)
        if not deleted:
            raise NotFoundError("Task not found")
        return ApiResponse.no_content()
