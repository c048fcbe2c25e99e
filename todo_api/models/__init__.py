# Todo API Models
from todo_api.models.base import BaseModel
from todo_api.models.task import Task
from todo_api.models.todo_list import TodoList
from todo_api.models.token_blacklist import TokenBlacklist
from todo_api.models.user import User

__all__ = [
    "BaseModel",
    "Task",
    "TodoList",
    "TokenBlacklist",
    "User",
]
