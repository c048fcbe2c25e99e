"""Request dispatcher: the single catch boundary between handlers and HTTP.

The dispatcher matches a request against the router, parses JSON bodies for
write routes, invokes the handler and renders its result. Every failure is
turned into a structured error response, and exactly one request log line is
written per dispatched request whichever path produced the response.
"""

import json
import time
from dataclasses import dataclass, field
from typing import Any

from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from todo_api.core.errors import (
    ApiError,
    InternalError,
    InvalidJsonError,
    NotFoundError,
    UnauthorizedError,
    UnsupportedMediaTypeError,
)
from todo_api.core.logging import get_logger
from todo_api.core.router import Router

logger = get_logger("dispatcher")
request_logger = get_logger("requests")

JSON_CONTENT_TYPE = "application/json"


@dataclass
class ApiResponse:
    """Handler result with an explicit status code."""

    body: Any = None
    status_code: int = 200
    headers: dict[str, str] = field(default_factory=dict)

    @classmethod
    def created(cls, body: Any) -> "ApiResponse":
        return cls(body=body, status_code=201)

    @classmethod
    def no_content(cls) -> "ApiResponse":
        return cls(status_code=204)


class Dispatcher:
    """Routes requests to handlers and renders their results."""

    def __init__(self, router: Router, debug: bool = False):
        router.freeze()
        self.router = router
        self.debug = debug

    async def dispatch(self, request: Request) -> Response:
        start = time.perf_counter()
        method = request.method.upper()
        path = request.url.path

        try:
            response = await self._handle(request, method, path)
        except ApiError as e:
            response = self.error_response(e)
        except Exception as e:
            logger.exception(
                "Unhandled exception",
                extra={
                    "context": {
                        "method": method,
                        "path": path,
                        "error": f"{type(e).__name__}: {e}",
                    }
                },
            )
            response = self.error_response(
                InternalError(
                    "An internal error occurred",
                    details={"exception": type(e).__name__, "message": str(e)},
                )
            )

        duration_ms = (time.perf_counter() - start) * 1000
        request_logger.info(
            f"{method} {path} - {response.status_code} - {duration_ms:.2f}ms",
            extra={
                "context": {
                    "method": method,
                    "path": path,
                    "status": response.status_code,
                    "duration_ms": round(duration_ms, 2),
                }
            },
        )
        return response

    async def _handle(self, request: Request, method: str, path: str) -> Response:
        matched = self.router.match(method, path)
        if matched is None:
            raise NotFoundError("Endpoint not found")

        route, params = matched
        if route.expects_json:
            request.state.payload = await self._read_json_object(request)

        result = await route.handler(request, params)
        return self.render(result)

    async def _read_json_object(self, request: Request) -> dict[str, Any]:
        content_type = request.headers.get("content-type", "")
        if JSON_CONTENT_TYPE not in content_type.lower():
            raise UnsupportedMediaTypeError("Content-Type must be application/json")

        body = await request.body()
        try:
            data = json.loads(body)
        except ValueError as e:
            # JSONDecodeError and UnicodeDecodeError are both ValueErrors
            raise InvalidJsonError("Invalid JSON in request body", details={"error": str(e)}) from e

        if not isinstance(data, dict):
            raise InvalidJsonError("Request body must be a JSON object")
        return data

    def render(self, result: Any) -> Response:
        """Turn a handler return value into a response.

        ``None`` means no content; an ``ApiResponse`` carries its own status;
        anything else is a JSON-compatible body sent with 200.
        """
        if isinstance(result, Response):
            return result
        if result is None:
            return Response(status_code=204)
        if isinstance(result, ApiResponse):
            if result.status_code == 204:
                return Response(status_code=204, headers=result.headers)
            return JSONResponse(
                content=result.body,
                status_code=result.status_code,
                headers=result.headers,
            )
        return JSONResponse(content=result)

    def error_response(self, error: ApiError) -> JSONResponse:
        body: dict[str, Any] = {"error": error.message, "code": error.code}
        if self.debug and error.details:
            body["details"] = error.details

        headers = {}
        if isinstance(error, UnauthorizedError):
            headers["WWW-Authenticate"] = "Bearer"
        return JSONResponse(content=body, status_code=error.status_code, headers=headers)
