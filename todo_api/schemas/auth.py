"""Pydantic schemas for authentication and user API."""

from datetime import datetime

from todo_api.schemas.common import CamelModel


class UserResponse(CamelModel):
    """User summary returned alongside a token."""

    id: str
    username: str
    email: str
    created_at: datetime


class ProfileResponse(UserResponse):
    """Response for the current user's profile."""

    updated_at: datetime | None


class AuthResponse(CamelModel):
    """Response with a bearer token after signup or login."""

    token: str
    user: UserResponse
