"""Pytest configuration and fixtures for Todo API tests.

Each test gets its own SQLite database file under pytest's ``tmp_path`` and a
fresh application built by ``create_app``. The ASGI transport does not run the
lifespan, so the fixtures create the tables themselves.
"""

from collections.abc import AsyncGenerator
from typing import Any

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from todo_api.core.config import Settings
from todo_api.core.database import Database
from todo_api.main import create_app
from todo_api.services.auth import Authenticator
from todo_api.services.token_blacklist import TokenBlacklistStore

TEST_JWT_SECRET = "test-secret-key-that-is-long-enough-for-hs256"
API = "/api/v1"

TEST_USERNAME = "testuser"
TEST_EMAIL = "testuser@example.com"
TEST_PASSWORD = "testpassword123"


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings pointing at a throwaway SQLite database."""
    return Settings(
        jwt_secret_key=TEST_JWT_SECRET,
        database_path=str(tmp_path / "todo.db"),
        debug=False,
    )


@pytest.fixture
def debug_settings(tmp_path) -> Settings:
    return Settings(
        jwt_secret_key=TEST_JWT_SECRET,
        database_path=str(tmp_path / "todo-debug.db"),
        debug=True,
    )


@pytest_asyncio.fixture
async def database(settings) -> AsyncGenerator[Database, None]:
    """Standalone database with all tables created."""
    db = Database.from_settings(settings)
    await db.create_all()
    yield db
    await db.dispose()


@pytest.fixture
def blacklist(database) -> TokenBlacklistStore:
    return TokenBlacklistStore(database)


@pytest.fixture
def authenticator(settings, blacklist) -> Authenticator:
    return Authenticator.from_settings(settings, blacklist)


@pytest_asyncio.fixture
async def app(settings):
    """Application instance with its tables created."""
    application = create_app(settings)
    await application.state.database.create_all()
    yield application
    await application.state.database.dispose()


@pytest_asyncio.fixture
async def async_client(app) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to the application."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def debug_client(debug_settings) -> AsyncGenerator[AsyncClient, None]:
    """Client for an application running with debug details enabled."""
    application = create_app(debug_settings)
    await application.state.database.create_all()
    transport = ASGITransport(app=application)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    await application.state.database.dispose()


@pytest_asyncio.fixture
async def signed_up_user(async_client) -> dict[str, Any]:
    """A registered user; returns the signup response body."""
    response = await async_client.post(
        f"{API}/auth/signup",
        json={"username": TEST_USERNAME, "email": TEST_EMAIL, "password": TEST_PASSWORD},
    )
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def auth_headers(signed_up_user) -> dict[str, str]:
    return {"Authorization": f"Bearer {signed_up_user['token']}"}


@pytest_asyncio.fixture
async def todo_list(async_client) -> dict[str, Any]:
    """A list created through the API."""
    response = await async_client.post(
        f"{API}/lists", json={"name": "Groceries", "description": "Weekly shopping"}
    )
    assert response.status_code == 201
    return response.json()
