"""Authentication service: password hashing and JWT issue/verify/revoke."""

import uuid
from datetime import UTC, datetime, timedelta
from functools import lru_cache
from typing import TYPE_CHECKING, Any

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError
from jwt.exceptions import PyJWTError
from sqlalchemy.exc import SQLAlchemyError

from todo_api.core.logging import get_logger
from todo_api.services.token_blacklist import TokenBlacklistStore

if TYPE_CHECKING:
    from todo_api.core.config import Settings

logger = get_logger("auth")

# Argon2 password hasher with recommended parameters
# Memory: 64 MiB, Time: 3 iterations, Parallelism: 4
ph = PasswordHasher(
    time_cost=3,
    memory_cost=65536,
    parallelism=4,
    hash_len=32,
    salt_len=16,
)

REQUIRED_CLAIMS = ["exp", "iat", "sub"]


class AuthError(Exception):
    """Base authentication error."""

    pass


class InvalidCredentialsError(AuthError):
    """Invalid username or password."""

    pass


class TokenError(AuthError):
    """JWT token error."""

    pass


class TokenExpiredError(TokenError):
    """JWT token has expired."""

    pass


class InvalidTokenError(TokenError):
    """JWT token is malformed or its signature does not verify."""

    pass


class TokenRevokedError(TokenError):
    """JWT token was blacklisted by a logout."""

    pass


def hash_password(password: str) -> str:
    """Hash a password using Argon2id."""
    return ph.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its hash using constant-time comparison."""
    try:
        ph.verify(password_hash, password)
        return True
    except VerifyMismatchError:
        return False
    except (VerificationError, InvalidHashError):
        logger.warning("Password hash could not be verified")
        return False


@lru_cache(maxsize=1)
def dummy_password_hash() -> str:
    """Hash checked against when a username does not exist, to equalize timing."""
    return hash_password("dummy-password-for-timing")


class Authenticator:
    """Issues and verifies signed bearer tokens.

    A token authenticates only if its signature verifies, its ``exp`` claim
    has not passed and it is absent from the blacklist.
    """

    def __init__(
        self,
        secret_key: str,
        blacklist: TokenBlacklistStore,
        expiry_seconds: int = 3600,
        algorithm: str = "HS256",
    ):
        self.secret_key = secret_key
        self.blacklist = blacklist
        self.expiry_seconds = expiry_seconds
        self.algorithm = algorithm

    @classmethod
    def from_settings(cls, settings: "Settings", blacklist: TokenBlacklistStore) -> "Authenticator":
        return cls(
            secret_key=settings.jwt_secret_key,
            blacklist=blacklist,
            expiry_seconds=settings.jwt_expiry_seconds,
            algorithm=settings.jwt_algorithm,
        )

    def issue(self, user_id: str, username: str) -> str:
        """Create a signed token for a user."""
        issued_at = datetime.now(UTC)
        payload = {
            "iat": issued_at,
            "exp": issued_at + timedelta(seconds=self.expiry_seconds),
            "sub": user_id,
            "username": username,
            # Unique per token so a revoked token never collides with a fresh one
            "jti": str(uuid.uuid4()),
        }
        token = jwt.encode(payload, self.secret_key, algorithm=self.algorithm)
        logger.info("JWT token generated", extra={"context": {"user_id": user_id}})
        return token

    def decode(self, token: str) -> dict[str, Any]:
        """Check signature, structure and expiry. Does not consult the blacklist."""
        try:
            return jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                options={"require": REQUIRED_CLAIMS},
            )
        except jwt.ExpiredSignatureError as e:
            raise TokenExpiredError("Token has expired") from e
        except PyJWTError as e:
            raise InvalidTokenError(f"Invalid token: {e}") from e

    async def verify(self, token: str) -> dict[str, Any]:
        """Validate a token and return its claims.

        Raises a TokenError subclass when the token is malformed, expired or
        revoked.
        """
        payload = self.decode(token)
        if await self._is_revoked(token):
            raise TokenRevokedError("Token has been revoked")
        return payload

    async def _is_revoked(self, token: str) -> bool:
        try:
            return await self.blacklist.contains(token)
        except SQLAlchemyError as e:
            # SECURITY TRADEOFF: fails open. An unreachable blacklist lets revoked
            # but unexpired tokens through rather than rejecting every request.
            logger.error(
                "Failed to check token blacklist; treating token as not revoked",
                extra={"context": {"error": str(e)}},
            )
            return False

    async def revoke(self, token: str) -> bool:
        """Blacklist a token until its natural expiry.

        Malformed or already expired tokens can never verify again, so they are
        not stored. Returns True when the token is blacklisted.
        """
        try:
            payload = self.decode(token)
        except TokenError:
            return False

        expires_at = datetime.fromtimestamp(payload["exp"], tz=UTC)
        await self.blacklist.add(token, str(payload["sub"]), expires_at)
        return True

    async def sweep(self) -> int:
        """Drop blacklist entries for tokens that have expired anyway."""
        return await self.blacklist.sweep()
