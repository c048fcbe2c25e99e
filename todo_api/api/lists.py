"""Lists API handlers."""

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
from todo_api.schemas import TodoListResponse
from todo_api.services.todo_list import TodoListService

LIST_FIELDS = ("name", "description")

CREATE_LIST_RULES = {
    "name": [Rule.required(), Rule.string(), Rule.max_length(255), Rule.not_empty()],
    "description": [Rule.string(), Rule.max_length(1000)],
}

UPDATE_LIST_RULES = {
    "name": [Rule.string(), Rule.max_length(255), Rule.not_empty()],
    "description": [Rule.string(), Rule.max_length(1000)],
}


class ListHandlers:
    """Handlers for ``/lists`` and ``/lists/:id``."""

    def __init__(self, database: Database):
        self.database = database

    async def list_all(self, request: Request, params: dict[str, str]) -> list[dict[str, Any]]:
        async with self.database.session() as db:
            lists = await TodoListService(db).list_all()
        return [TodoListResponse.model_validate(item).to_json() for item in lists]

    async def get(self, request: Request, params: dict[str, str]) -> dict[str, Any]:
        list_id = require_uuid(params["id"], "list ID")
        async with self.database.session() as db:
            todo_list = await TodoListService(db).get(list_id)
        if todo_list is None:
            raise NotFoundError("List not found")
        return TodoListResponse.model_validate(todo_list).to_json()

    async def create(self, request: Request, params: dict[str, str]) -> ApiResponse:
        data = sanitize_fields(payload(request), LIST_FIELDS)
        validate_or_raise(data, CREATE_LIST_RULES)

        async with self.database.session() as db:
            todo_list = await TodoListService(db).create(data)
        return ApiResponse.created(TodoListResponse.model_validate(todo_list).to_json())

    async def update(self, request: Request, params: dict[str, str]) -> dict[str, Any]:
        list_id = require_uuid(params["id"], "list ID")
        data = sanitize_fields(payload(request), LIST_FIELDS)
        require_any_field(data, LIST_FIELDS)
        validate_or_raise(data, only_present(UPDATE_LIST_RULES, data))

        async with self.database.session() as db:
            todo_list = await TodoListService(db).update(list_id, data)
        if todo_list is None:
            raise NotFoundError("List not found")
        return TodoListResponse.model_validate(todo_list).to_json()

    async def delete(self, request: Request, params: dict[str, str]) -> ApiResponse:
        list_id = require_uuid(params["id"], "list ID")
        async with self.database.session() as db:
            deleted = await TodoListService(db).delete(list_id)
        if not deleted:
            raise NotFoundError("List not found")
        return ApiResponse.no_content()
