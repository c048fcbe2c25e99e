"""Authentication and user profile API handlers.

Every credential failure (missing header, bad signature, expiry, revocation)
surfaces to the caller as the same 401 so clients cannot tell which check
rejected the token.
"""

import re
from typing import Any

from pydantic import EmailStr, TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import SQLAlchemyError
from starlette.requests import Request

from todo_api.api.common import payload, sanitize_fields, validate_or_raise
from todo_api.core.database import Database
from todo_api.core.dispatcher import ApiResponse
from todo_api.core.errors import (
    ConflictError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from todo_api.core.logging import get_logger
from todo_api.core.validation import Rule
from todo_api.schemas import AuthResponse, ProfileResponse, UserResponse
from todo_api.services.auth import Authenticator, InvalidCredentialsError, TokenError
from todo_api.services.user import UserExistsError, UserService

logger = get_logger("api.auth")

BEARER_PATTERN = re.compile(r"^Bearer\s+(.+)$", re.IGNORECASE)

_email_adapter = TypeAdapter(EmailStr)

SIGNUP_RULES = {
    "username": [
        Rule.required(),
        Rule.string(),
        Rule.min_length(3),
        Rule.max_length(50),
        Rule.not_empty(),
    ],
    "email": [Rule.required(), Rule.string(), Rule.max_length(255), Rule.not_empty()],
    "password": [Rule.required(), Rule.string(), Rule.min_length(8), Rule.max_length(100)],
}

LOGIN_RULES = {
    "username": [Rule.required(), Rule.string(), Rule.not_empty()],
    "password": [Rule.required(), Rule.string()],
}


def extract_bearer_token(request: Request) -> str | None:
    """Token from ``Authorization: Bearer <token>``; the scheme is case-insensitive."""
    header = request.headers.get("authorization")
    if not header:
        return None
    match = BEARER_PATTERN.match(header.strip())
    if match is None:
        return None
    return match.group(1).strip() or None


async def require_claims(request: Request, authenticator: Authenticator) -> dict[str, Any]:
    """Verified claims of the request's bearer token, or UnauthorizedError."""
    token = extract_bearer_token(request)
    if token is None:
        raise UnauthorizedError("Missing or invalid authorization token")
    try:
        return await authenticator.verify(token)
    except TokenError as e:
        logger.info("Token rejected", extra={"context": {"reason": str(e)}})
        raise UnauthorizedError("Invalid or expired token") from e


def _is_valid_email(value: str) -> bool:
    try:
        _email_adapter.validate_python(value)
    except PydanticValidationError:
        return False
    return True


class AuthHandlers:
    """Handlers for ``/auth/*`` and ``/users/profile``."""

    def __init__(self, database: Database, authenticator: Authenticator):
        self.database = database
        self.authenticator = authenticator

    def _auth_response(self, user: Any) -> dict[str, Any]:
        token = self.authenticator.issue(user.id, user.username)
        return AuthResponse(token=token, user=UserResponse.model_validate(user)).to_json()

    async def signup(self, request: Request, params: dict[str, str]) -> ApiResponse:
        data = sanitize_fields(payload(request), ("username", "email"))
        validate_or_raise(data, SIGNUP_RULES)
        if not _is_valid_email(data["email"]):
            raise ValidationError("Invalid email format")

        async with self.database.session() as db:
            try:
                user = await UserService(db).create(data["username"], data["email"], data["password"])
            except UserExistsError as e:
                raise ConflictError("Username or email already exists") from e

        logger.info("User signed up", extra={"context": {"user_id": user.id}})
        return ApiResponse.created(self._auth_response(user))

    async def login(self, request: Request, params: dict[str, str]) -> dict[str, Any]:
        data = sanitize_fields(payload(request), ("username",))
        validate_or_raise(data, LOGIN_RULES)

        async with self.database.session() as db:
            try:
                user = await UserService(db).authenticate(data["username"], data["password"])
            except InvalidCredentialsError as e:
                raise UnauthorizedError("Invalid username or password") from e

        logger.info("User logged in", extra={"context": {"user_id": user.id}})
        return self._auth_response(user)

    async def logout(self, request: Request, params: dict[str, str]) -> ApiResponse:
        """Revoke the bearer token. Always succeeds from the caller's view."""
        token = extract_bearer_token(request)
        if token is None:
            return ApiResponse.no_content()

        try:
            claims = await self.authenticator.verify(token)
        except TokenError:
            return ApiResponse.no_content()

        try:
            await self.authenticator.revoke(token)
        except SQLAlchemyError as e:
            logger.error(
                "Failed to blacklist token on logout",
                extra={"context": {"user_id": claims.get("sub"), "error": str(e)}},
            )
        return ApiResponse.no_content()

    async def profile(self, request: Request, params: dict[str, str]) -> dict[str, Any]:
        claims = await require_claims(request, self.authenticator)
        async with self.database.session() as db:
            user = await UserService(db).get(str(claims["sub"]))
        if user is None:
            raise NotFoundError("User not found")
        return ProfileResponse.model_validate(user).to_json()
