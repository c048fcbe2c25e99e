"""API error taxonomy.

Every error that reaches a caller is an ``ApiError``. The dispatcher renders
it as ``{"error": message, "code": code}`` with the class's HTTP status;
``details`` are attached only in debug mode.
"""

from typing import Any


class ApiError(Exception):
    """Base API error."""

    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ClientInputError(ApiError):
    """Malformed or invalid request input. Safe to report verbatim."""

    status_code = 400
    code = "VALIDATION_ERROR"


class ValidationError(ClientInputError):
    """Request payload failed field validation."""

    pass


class InvalidJsonError(ClientInputError):
    """Request body is not a JSON object."""

    code = "INVALID_JSON"


class InvalidUuidError(ClientInputError):
    """Path identifier is not a UUID v4."""

    code = "INVALID_UUID"


class UnsupportedMediaTypeError(ClientInputError):
    """Write request without a JSON content type."""

    status_code = 415
    code = "UNSUPPORTED_MEDIA_TYPE"


class UnauthorizedError(ApiError):
    """Missing, invalid, expired or revoked credentials.

    Deliberately undifferentiated: callers are never told which check failed.
    """

    status_code = 401
    code = "UNAUTHORIZED"


class NotFoundError(ApiError):
    """Route or resource does not exist."""

    status_code = 404
    code = "NOT_FOUND"


class ConflictError(ApiError):
    """Uniqueness violation."""

    status_code = 409
    code = "CONFLICT"


class InternalError(ApiError):
    """Unexpected server-side failure. Reported with a generic message."""

    pass
