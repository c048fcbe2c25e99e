# Todo API Core Module
from .config import Settings, get_settings
from .database import Base, Database
from .dispatcher import ApiResponse, Dispatcher
from .logging import get_logger, setup_logging
from .router import Router

__all__ = [
    "ApiResponse",
    "Base",
    "Database",
    "Dispatcher",
    "Router",
    "Settings",
    "get_logger",
    "get_settings",
    "setup_logging",
]
