# Todo API endpoint handlers
from todo_api.api.router import build_router

__all__ = ["build_router"]
