"""Todo API configuration loaded from environment variables.

Every setting can be overridden with a ``TODO_API_`` prefixed environment
variable (or a ``.env`` file in the working directory), e.g.
``TODO_API_JWT_SECRET_KEY`` or ``TODO_API_DEBUG=true``.

Settings are read once at process start and passed explicitly to the
components that need them.
"""

import logging
import secrets
from functools import lru_cache

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
MIN_JWT_SECRET_LENGTH = 32


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_prefix="TODO_API_",
        env_file=".env",
        extra="ignore",
    )

    app_name: str = "Todo API"
    app_version: str = "1.0.0"
    api_version: str = "v1"

    # Attaches `details` to error responses
    debug: bool = False

    jwt_secret_key: str | None = None
    jwt_algorithm: str = "HS256"
    jwt_expiry_seconds: int = Field(default=3600, gt=0)

    log_level: str = "INFO"
    log_file: str | None = None

    database_path: str = "data/todo.db"

    cors_allow_origin: str = "*"
    blacklist_cleanup_interval_seconds: int = Field(default=300, gt=0)

    host: str = "0.0.0.0"
    port: int = Field(default=8000, gt=0, lt=65536)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of: {', '.join(LOG_LEVELS)}")
        return level

    @field_validator("jwt_secret_key")
    @classmethod
    def validate_jwt_secret_key(cls, value: str | None) -> str | None:
        if value is not None and len(value) < MIN_JWT_SECRET_LENGTH:
            raise ValueError(
                f"jwt_secret_key must be at least {MIN_JWT_SECRET_LENGTH} characters"
            )
        return value

    @model_validator(mode="after")
    def ensure_jwt_secret_key(self) -> "Settings":
        if self.jwt_secret_key is None:
            logger.warning(
                "TODO_API_JWT_SECRET_KEY is not set; using a random per-process key. "
                "Issued tokens will stop verifying after a restart."
            )
            self.jwt_secret_key = secrets.token_urlsafe(48)
        return self

    @property
    def database_url(self) -> str:
        return f"sqlite+aiosqlite:///{self.database_path}"

    @property
    def api_prefix(self) -> str:
        return f"/api/{self.api_version}"


@lru_cache
def get_settings() -> Settings:
    """Settings for the running process, read from the environment once."""
    return Settings()
