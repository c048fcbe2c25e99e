# Todo API Pydantic Schemas
from todo_api.schemas.auth import AuthResponse, ProfileResponse, UserResponse
from todo_api.schemas.common import CamelModel
from todo_api.schemas.task import TaskResponse
from todo_api.schemas.todo_list import TodoListResponse

__all__ = [
    "AuthResponse",
    "CamelModel",
    "ProfileResponse",
    "TaskResponse",
    "TodoListResponse",
    "UserResponse",
]
