"""Revoked JWT tokens - survives process restarts."""

from datetime import datetime

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from todo_api.core.database import Base
from todo_api.models.base import UTCDateTime, utcnow


class TokenBlacklist(Base):
    """A revoked JWT, keyed by its raw encoded form.

    Entries are created on logout and swept once the token's own expiry
    has passed.
    """

    __tablename__ = "token_blacklist"

    token: Mapped[str] = mapped_column(Text, primary_key=True)
    user_id: Mapped[str] = mapped_column(String(36), nullable=False)
    blacklisted_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)
    expires_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, index=True)

    def __repr__(self) -> str:
        return f"<TokenBlacklist user={self.user_id} expires_at={self.expires_at}>"
