"""Todo API Database Configuration - Async SQLAlchemy over SQLite."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Any

from sqlalchemy import event, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import declarative_base

from todo_api.core.logging import get_logger

if TYPE_CHECKING:
    from todo_api.core.config import Settings

logger = get_logger("database")

# Base class for models
Base = declarative_base()


def _enable_foreign_keys(dbapi_connection: Any, connection_record: Any) -> None:
    # SQLite ignores ON DELETE CASCADE unless enabled per connection
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """Engine and session factory, constructed once per process."""

    def __init__(self, url: str, echo: bool = False):
        self.url = url
        self.engine: AsyncEngine = create_async_engine(url, echo=echo)
        event.listen(self.engine.sync_engine, "connect", _enable_foreign_keys)
        self.session_maker = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def from_settings(cls, settings: "Settings") -> "Database":
        """Create the database, making sure the storage directory exists."""
        Path(settings.database_path).parent.mkdir(parents=True, exist_ok=True)
        # Only echo SQL when debug is explicitly enabled
        return cls(settings.database_url, echo=settings.debug and settings.log_level == "DEBUG")

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Unit of work: commits on success, rolls back on any error."""
        async with self.session_maker() as session:
            try:
                yield session
                await session.commit()
            except BaseException:
                # Includes asyncio.CancelledError so cancellation still rolls back
                await session.rollback()
                raise

    async def create_all(self) -> None:
        """Create all tables that do not exist yet."""
        # Import models so they are registered on Base.metadata
        import todo_api.models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables initialized", extra={"context": {"url": self.url}})

    async def check_connection(self) -> bool:
        """Check if the database is reachable."""
        try:
            async with self.session_maker() as session:
                await session.execute(text("SELECT 1"))
                return True
        except (OSError, SQLAlchemyError) as e:
            logger.warning(f"Database connection check failed: {e}")
            return False

    async def dispose(self) -> None:
        await self.engine.dispose()
