"""Health check handler with database connectivity check."""

from datetime import UTC, datetime

from starlette.requests import Request

from todo_api.core.config import Settings
from todo_api.core.database import Database
from todo_api.core.dispatcher import ApiResponse


class HealthHandlers:
    def __init__(self, settings: Settings, database: Database):
        self.settings = settings
        self.database = database

    async def health(self, request: Request, params: dict[str, str]) -> ApiResponse:
        """
        Health check endpoint.

        Returns 503 if the database is unavailable.
        """
        db_healthy = await self.database.check_connection()
        body = {
            "status": "healthy" if db_healthy else "unhealthy",
            "timestamp": datetime.now(UTC).isoformat(),
            "service": self.settings.app_name,
            "version": self.settings.app_version,
            "checks": {"database": "connected" if db_healthy else "disconnected"},
        }
        return ApiResponse(body=body, status_code=200 if db_healthy else 503)
