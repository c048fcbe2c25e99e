"""Database-backed JWT revocation list."""

from datetime import UTC, datetime

from sqlalchemy import delete, select
from sqlalchemy.dialects.sqlite import insert

from todo_api.core.database import Database
from todo_api.core.logging import get_logger
from todo_api.models.token_blacklist import TokenBlacklist

logger = get_logger("token_blacklist")


class TokenBlacklistStore:
    """Persists revoked tokens until their natural expiry.

    Each operation runs in its own short unit of work so revocation state is
    committed independently of the request's other writes.
    """

    def __init__(self, database: Database):
        self.database = database

    async def add(self, token: str, user_id: str, expires_at: datetime) -> None:
        """Blacklist a token. Re-adding an already blacklisted token is a no-op."""
        stmt = (
            insert(TokenBlacklist)
            .values(
                token=token,
                user_id=user_id,
                blacklisted_at=datetime.now(UTC),
                expires_at=expires_at,
            )
            .on_conflict_do_nothing(index_elements=[TokenBlacklist.token])
        )
        async with self.database.session() as db:
            await db.execute(stmt)

        logger.info(
            "Token blacklisted",
            extra={"context": {"user_id": user_id, "token_prefix": f"{token[:20]}..."}},
        )

    async def contains(self, token: str) -> bool:
        """Check if a token has been revoked."""
        async with self.database.session() as db:
            result = await db.execute(
                select(TokenBlacklist.token).where(TokenBlacklist.token == token)
            )
            return result.scalar_one_or_none() is not None

    async def sweep(self) -> int:
        """Remove entries whose expiry has passed. Returns count removed."""
        now = datetime.now(UTC)
        async with self.database.session() as db:
            result = await db.execute(delete(TokenBlacklist).where(TokenBlacklist.expires_at < now))
            removed = result.rowcount or 0

        if removed > 0:
            logger.info(
                "Cleaned up expired blacklisted tokens", extra={"context": {"count": removed}}
            )
        return removed
