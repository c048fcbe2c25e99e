# Todo API Services
from todo_api.services.auth import Authenticator
from todo_api.services.task import TaskService
from todo_api.services.todo_list import TodoListService
from todo_api.services.token_blacklist import TokenBlacklistStore
from todo_api.services.user import UserExistsError, UserService

__all__ = [
    "Authenticator",
    "TaskService",
    "TodoListService",
    "TokenBlacklistStore",
    "UserExistsError",
    "UserService",
]
