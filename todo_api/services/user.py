"""User service - accounts and credential checks."""

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from todo_api.core.logging import get_logger
from todo_api.models import User
from todo_api.services.auth import (
    InvalidCredentialsError,
    dummy_password_hash,
    hash_password,
    verify_password,
)

logger = get_logger("user")


class UserExistsError(Exception):
    """Username or email is already registered."""

    pass


class UserService:
    """Service for user accounts."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, user_id: str) -> User | None:
        """Get user by ID."""
        result = await self.db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def get_by_username(self, username: str) -> User | None:
        """Get user by username."""
        result = await self.db.execute(select(User).where(User.username == username))
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> User | None:
        """Get user by email."""
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def create(self, username: str, email: str, password: str) -> User:
        """Create a user. Raises UserExistsError on a duplicate username or email."""
        existing = await self.db.execute(
            select(User.id).where(or_(User.username == username, User.email == email))
        )
        if existing.first() is not None:
            logger.warning(
                "User creation failed - duplicate",
                extra={"context": {"username": username, "email": email}},
            )
            raise UserExistsError("Username or email already exists")

        user = User(username=username, email=email, password_hash=hash_password(password))
        self.db.add(user)
        try:
            await self.db.flush()
        except IntegrityError as e:
            # Lost a race with a concurrent signup
            await self.db.rollback()
            raise UserExistsError("Username or email already exists") from e

        await self.db.refresh(user)
        logger.info("User created", extra={"context": {"id": user.id, "username": username}})
        return user

    async def authenticate(self, username: str, password: str) -> User:
        """Return the user for valid credentials.

        Raises InvalidCredentialsError for both "user not found" and
        "wrong password" to prevent user enumeration.
        """
        user = await self.get_by_username(username)

        if user is None:
            # Perform a dummy verification to prevent timing attacks
            verify_password(password, dummy_password_hash())
            logger.warning("Login failed - user not found", extra={"context": {"username": username}})
            raise InvalidCredentialsError("Invalid username or password")

        if not verify_password(password, user.password_hash):
            logger.warning("Login failed - invalid password", extra={"context": {"username": username}})
            raise InvalidCredentialsError("Invalid username or password")

        return user
