"""Tests for the request dispatcher: rendering, error mapping and request logging."""

import json
import logging

import pytest
from starlette.requests import Request

from todo_api.core.dispatcher import ApiResponse, Dispatcher
from todo_api.core.errors import ConflictError, UnauthorizedError
from todo_api.core.router import Router


def make_request(
    method: str = "GET",
    path: str = "/",
    body: bytes = b"",
    headers: dict[str, str] | None = None,
) -> Request:
    """Build a Starlette request without a server."""
    raw_headers = [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()]
    sent = False

    async def receive():
        nonlocal sent
        if sent:
            return {"type": "http.disconnect"}
        sent = True
        return {"type": "http.request", "body": body, "more_body": False}

    scope = {
        "type": "http",
        "method": method,
        "path": path,
        "raw_path": path.encode(),
        "query_string": b"",
        "headers": raw_headers,
        "scheme": "http",
        "server": ("test", 80),
        "client": ("127.0.0.1", 12345),
    }
    return Request(scope, receive)


def body_of(response) -> dict:
    return json.loads(response.body)


def request_records(caplog):
    return [r for r in caplog.records if r.name == "todo_api.requests"]


async def echo_params(request, params):
    return {"params": params}


async def created(request, params):
    return ApiResponse.created({"id": "1"})


async def no_content(request, params):
    return ApiResponse.no_content()


async def returns_none(request, params):
    return None


async def echo_payload(request, params):
    return request.state.payload


async def explode(request, params):
    raise RuntimeError("database on fire")


async def conflict(request, params):
    raise ConflictError("Username or email already exists", details={"field": "username"})


async def unauthorized(request, params):
    raise UnauthorizedError("Invalid or expired token")


def build_dispatcher(debug: bool = False) -> Dispatcher:
    router = Router()
    router.get("/items/:id", echo_params)
    router.post("/items", created)
    router.post("/echo", echo_payload)
    router.delete("/items/:id", no_content)
    router.get("/none", returns_none)
    router.get("/explode", explode)
    router.get("/conflict", conflict)
    router.get("/private", unauthorized)
    return Dispatcher(router, debug=debug)


@pytest.mark.asyncio
class TestRendering:
    async def test_plain_value_is_200_json(self):
        response = await build_dispatcher().dispatch(make_request("GET", "/items/42"))
        assert response.status_code == 200
        assert body_of(response) == {"params": {"id": "42"}}

    async def test_created(self):
        response = await build_dispatcher().dispatch(
            make_request("POST", "/items", b"{}", {"Content-Type": "application/json"})
        )
        assert response.status_code == 201
        assert body_of(response) == {"id": "1"}

    async def test_no_content_has_empty_body(self):
        response = await build_dispatcher().dispatch(make_request("DELETE", "/items/1"))
        assert response.status_code == 204
        assert response.body == b""

    async def test_none_is_no_content(self):
        response = await build_dispatcher().dispatch(make_request("GET", "/none"))
        assert response.status_code == 204

    async def test_dispatcher_freezes_router(self):
        router = Router()
        Dispatcher(router)
        assert router.frozen


@pytest.mark.asyncio
class TestErrors:
    async def test_unmatched_route_is_404(self):
        response = await build_dispatcher().dispatch(make_request("GET", "/missing"))
        assert response.status_code == 404
        assert body_of(response) == {"error": "Endpoint not found", "code": "NOT_FOUND"}

    async def test_wrong_method_is_404(self):
        response = await build_dispatcher().dispatch(make_request("PUT", "/items/1"))
        assert response.status_code == 404

    async def test_api_error_is_rendered(self):
        response = await build_dispatcher().dispatch(make_request("GET", "/conflict"))
        assert response.status_code == 409
        assert body_of(response) == {
            "error": "Username or email already exists",
            "code": "CONFLICT",
        }

    async def test_details_only_in_debug(self):
        response = await build_dispatcher(debug=True).dispatch(make_request("GET", "/conflict"))
        assert body_of(response)["details"] == {"field": "username"}

    async def test_unexpected_exception_is_500(self):
        response = await build_dispatcher().dispatch(make_request("GET", "/explode"))
        assert response.status_code == 500
        body = body_of(response)
        assert body == {"error": "An internal error occurred", "code": "INTERNAL_ERROR"}
        assert "fire" not in response.body.decode()

    async def test_unexpected_exception_details_in_debug(self):
        response = await build_dispatcher(debug=True).dispatch(make_request("GET", "/explode"))
        assert body_of(response)["details"] == {
            "exception": "RuntimeError",
            "message": "database on fire",
        }

    async def test_unauthorized_sets_www_authenticate(self):
        response = await build_dispatcher().dispatch(make_request("GET", "/private"))
        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"


@pytest.mark.asyncio
class TestJsonBody:
    async def test_parsed_object_reaches_handler(self):
        response = await build_dispatcher().dispatch(
            make_request(
                "POST",
                "/echo",
                b'{"name": "Groceries"}',
                {"Content-Type": "application/json; charset=utf-8"},
            )
        )
        assert response.status_code == 200
        assert body_of(response) == {"name": "Groceries"}

    async def test_missing_content_type_is_415(self):
        response = await build_dispatcher().dispatch(
            make_request("POST", "/echo", b'{"name": "x"}', {"Content-Type": "text/plain"})
        )
        assert response.status_code == 415
        assert body_of(response)["code"] == "UNSUPPORTED_MEDIA_TYPE"

    async def test_malformed_json_is_invalid_json(self):
        response = await build_dispatcher().dispatch(
            make_request("POST", "/echo", b"{not json", {"Content-Type": "application/json"})
        )
        assert response.status_code == 400
        assert body_of(response) == {
            "error": "Invalid JSON in request body",
            "code": "INVALID_JSON",
        }

    async def test_non_object_json_is_invalid_json(self):
        response = await build_dispatcher().dispatch(
            make_request("POST", "/echo", b"[1, 2]", {"Content-Type": "application/json"})
        )
        assert response.status_code == 400
        assert body_of(response)["code"] == "INVALID_JSON"


@pytest.mark.asyncio
class TestRequestLogging:
    async def test_one_line_on_success(self, caplog):
        caplog.set_level(logging.INFO, logger="todo_api")
        await build_dispatcher().dispatch(make_request("GET", "/items/7"))
        records = request_records(caplog)
        assert len(records) == 1
        assert records[0].getMessage().startswith("GET /items/7 - 200 - ")
        assert records[0].context["status"] == 200
        assert records[0].context["method"] == "GET"
        assert records[0].context["duration_ms"] >= 0

    async def test_one_line_on_no_match(self, caplog):
        caplog.set_level(logging.INFO, logger="todo_api")
        await build_dispatcher().dispatch(make_request("GET", "/missing"))
        records = request_records(caplog)
        assert len(records) == 1
        assert records[0].context["status"] == 404

    async def test_one_line_on_exception(self, caplog):
        caplog.set_level(logging.INFO, logger="todo_api")
        await build_dispatcher().dispatch(make_request("GET", "/explode"))
        records = request_records(caplog)
        assert len(records) == 1
        assert records[0].context["status"] == 500

        errors = [r for r in caplog.records if r.name == "todo_api.dispatcher"]
        assert errors and errors[0].exc_info is not None
        assert errors[0].context["path"] == "/explode"
