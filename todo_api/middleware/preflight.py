"""CORS preflight handling.

OPTIONS requests never reach the dispatcher: they are answered here with 204
and the allowed methods and headers. Every other response gets
``Access-Control-Allow-Origin``.
"""

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

ALLOWED_METHODS = ("GET", "POST", "PATCH", "DELETE", "OPTIONS")
ALLOWED_HEADERS = ("Content-Type", "Authorization")


class PreflightMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp, allow_origin: str = "*"):
        super().__init__(app)
        self.allow_origin = allow_origin

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.method == "OPTIONS":
            return Response(
                status_code=204,
                headers={
                    "Access-Control-Allow-Origin": self.allow_origin,
                    "Access-Control-Allow-Methods": ", ".join(ALLOWED_METHODS),
                    "Access-Control-Allow-Headers": ", ".join(ALLOWED_HEADERS),
                },
            )

        response = await call_next(request)
        response.headers["Access-Control-Allow-Origin"] = self.allow_origin
        return response
