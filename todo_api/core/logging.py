"""Todo API Logging Configuration."""

import json
import logging
import sys
from typing import Literal

# Human-readable format for development
DEV_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s%(context_suffix)s"


class JSONFormatter(logging.Formatter):
    """Structured JSON log formatter.

    Structured fields are passed with ``extra={"context": {...}}`` and are
    emitted under a ``context`` key. json.dumps() escapes every field, so
    messages containing quotes or newlines never produce malformed lines.
    """

    def __init__(self):
        super().__init__(datefmt="%Y-%m-%dT%H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        context = getattr(record, "context", None)
        if context:
            log_entry["context"] = context
        if record.exc_info and record.exc_info[0] is not None:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry, default=str)


class DevFormatter(logging.Formatter):
    """Readable single-line format that appends the context mapping as JSON."""

    def __init__(self):
        super().__init__(fmt=DEV_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:
        context = getattr(record, "context", None)
        record.context_suffix = f" - {json.dumps(context, default=str)}" if context else ""
        return super().format(record)


def setup_logging(
    level: str = "INFO",
    format_type: Literal["structured", "dev"] = "dev",
    log_file: str | None = None,
) -> None:
    """
    Configure application logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_type: Log format - 'structured' for JSON, 'dev' for readable
        log_file: Optional path of a file that receives the same records
    """
    formatter: logging.Formatter = JSONFormatter() if format_type == "structured" else DevFormatter()

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    for handler in handlers:
        handler.setFormatter(formatter)

    logging.root.handlers = handlers
    logging.root.setLevel(getattr(logging, level.upper()))

    # Request lines come from todo_api.requests; uvicorn's access log would duplicate them
    for logger_name in ["uvicorn", "uvicorn.error", "uvicorn.access"]:
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    # Keep SQLAlchemy quiet unless debugging
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.DEBUG if level.upper() == "DEBUG" else logging.WARNING
    )

    logger = logging.getLogger("todo_api")
    logger.info(f"Logging configured: level={level}, format={format_type}")


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the todo_api prefix."""
    return logging.getLogger(f"todo_api.{name}")
