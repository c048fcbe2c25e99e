"""Todo API - FastAPI Application Factory."""

import asyncio
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response

from todo_api.api import build_router
from todo_api.core.config import Settings, get_settings
from todo_api.core.database import Database
from todo_api.core.dispatcher import Dispatcher
from todo_api.core.logging import get_logger, setup_logging
from todo_api.middleware import PreflightMiddleware, SecurityHeadersMiddleware
from todo_api.services.auth import Authenticator
from todo_api.services.token_blacklist import TokenBlacklistStore

logger = get_logger("main")

DISPATCHED_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD"]


def task_done_callback(task: asyncio.Task[None]) -> None:
    """Log unhandled exceptions from background tasks."""
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error(f"Background task {task.get_name()} failed: {exc}")


async def _token_blacklist_cleanup_loop(authenticator: Authenticator, interval: int) -> None:
    """Periodically remove expired entries from the token blacklist."""
    while True:
        await asyncio.sleep(interval)
        try:
            await authenticator.sweep()
        except Exception:
            logger.exception("Error cleaning up token blacklist")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    settings: Settings = app.state.settings
    database: Database = app.state.database

    setup_logging(
        level=settings.log_level,
        format_type="dev" if settings.debug else "structured",
        log_file=settings.log_file,
    )
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")

    await database.create_all()

    cleanup_task = asyncio.create_task(
        _token_blacklist_cleanup_loop(
            app.state.authenticator, settings.blacklist_cleanup_interval_seconds
        ),
        name="token-blacklist-cleanup",
    )
    cleanup_task.add_done_callback(task_done_callback)

    yield

    # Shutdown
    logger.info("Shutting down...")
    cleanup_task.cancel()
    try:
        await cleanup_task
    except asyncio.CancelledError:
        pass
    await database.dispose()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or get_settings()

    database = Database.from_settings(settings)
    authenticator = Authenticator.from_settings(settings, TokenBlacklistStore(database))
    dispatcher = Dispatcher(
        build_router(settings, database, authenticator),
        debug=settings.debug,
    )

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        lifespan=lifespan,
        # Every path is owned by the dispatcher
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.settings = settings
    app.state.database = database
    app.state.authenticator = authenticator
    app.state.dispatcher = dispatcher

    app.add_middleware(SecurityHeadersMiddleware)
    # Added last so it is outermost and preflight never reaches the dispatcher
    app.add_middleware(PreflightMiddleware, allow_origin=settings.cors_allow_origin)

    @app.api_route("/{path:path}", methods=DISPATCHED_METHODS, include_in_schema=False)
    async def dispatch(request: Request) -> Response:
        return await dispatcher.dispatch(request)

    return app
