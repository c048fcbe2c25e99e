"""Tests for signup, login, logout and profile endpoints."""

from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy.exc import OperationalError

API = "/api/v1"

TEST_USERNAME = "testuser"
TEST_EMAIL = "testuser@example.com"
TEST_PASSWORD = "testpassword123"


@pytest.mark.asyncio
async def test_signup_returns_token_and_user(async_client):
    response = await async_client.post(
        f"{API}/auth/signup",
        json={"username": "alice", "email": "alice@example.com", "password": "s3cretpass"},
    )
    assert response.status_code == 201
    data = response.json()
    assert data["token"]
    assert data["user"]["username"] == "alice"
    assert data["user"]["email"] == "alice@example.com"
    assert set(data["user"]) == {"id", "username", "email", "createdAt"}


@pytest.mark.asyncio
async def test_signup_duplicate_username(async_client, signed_up_user):
    response = await async_client.post(
        f"{API}/auth/signup",
        json={"username": TEST_USERNAME, "email": "other@example.com", "password": TEST_PASSWORD},
    )
    assert response.status_code == 409
    assert response.json() == {"error": "Username or email already exists", "code": "CONFLICT"}


@pytest.mark.asyncio
async def test_signup_duplicate_email(async_client, signed_up_user):
    response = await async_client.post(
        f"{API}/auth/signup",
        json={"username": "someoneelse", "email": TEST_EMAIL, "password": TEST_PASSWORD},
    )
    assert response.status_code == 409


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("body", "message"),
    [
        ({"email": "a@example.com", "password": "password1"}, "username is required"),
        (
            {"username": "ab", "email": "a@example.com", "password": "password1"},
            "username must be at least 3 characters",
        ),
        ({"username": "alice", "email": "a@example.com", "password": "short"}, (
            "password must be at least 8 characters"
        )),
        ({"username": "alice", "email": "not-an-email", "password": "password1"}, (
            "Invalid email format"
        )),
    ],
)
async def test_signup_validation(async_client, body, message):
    response = await async_client.post(f"{API}/auth/signup", json=body)
    assert response.status_code == 400
    assert response.json() == {"error": message, "code": "VALIDATION_ERROR"}


@pytest.mark.asyncio
async def test_login(async_client, signed_up_user):
    response = await async_client.post(
        f"{API}/auth/login", json={"username": TEST_USERNAME, "password": TEST_PASSWORD}
    )
    assert response.status_code == 200
    data = response.json()
    assert data["token"]
    assert data["user"]["id"] == signed_up_user["user"]["id"]


@pytest.mark.asyncio
async def test_login_wrong_password(async_client, signed_up_user):
    response = await async_client.post(
        f"{API}/auth/login", json={"username": TEST_USERNAME, "password": "wrongpassword"}
    )
    assert response.status_code == 401
    assert response.json() == {"error": "Invalid username or password", "code": "UNAUTHORIZED"}


@pytest.mark.asyncio
async def test_login_unknown_user_same_error(async_client):
    response = await async_client.post(
        f"{API}/auth/login", json={"username": "ghost", "password": "whatever123"}
    )
    assert response.status_code == 401
    assert response.json()["error"] == "Invalid username or password"


@pytest.mark.asyncio
async def test_login_requires_fields(async_client):
    response = await async_client.post(f"{API}/auth/login", json={"username": "alice"})
    assert response.status_code == 400
    assert response.json()["error"] == "password is required"


@pytest.mark.asyncio
async def test_profile(async_client, signed_up_user, auth_headers):
    response = await async_client.get(f"{API}/users/profile", headers=auth_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["id"] == signed_up_user["user"]["id"]
    assert data["username"] == TEST_USERNAME
    assert data["email"] == TEST_EMAIL
    assert "updatedAt" in data
    assert "passwordHash" not in data


@pytest.mark.asyncio
async def test_profile_lowercase_bearer_scheme(async_client, signed_up_user):
    headers = {"Authorization": f"bearer {signed_up_user['token']}"}
    response = await async_client.get(f"{API}/users/profile", headers=headers)
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_profile_without_token(async_client):
    response = await async_client.get(f"{API}/users/profile")
    assert response.status_code == 401
    assert response.json() == {
        "error": "Missing or invalid authorization token",
        "code": "UNAUTHORIZED",
    }
    assert response.headers["WWW-Authenticate"] == "Bearer"


@pytest.mark.asyncio
async def test_profile_with_garbage_token(async_client):
    response = await async_client.get(
        f"{API}/users/profile", headers={"Authorization": "Bearer garbage"}
    )
    assert response.status_code == 401
    assert response.json()["error"] == "Invalid or expired token"


@pytest.mark.asyncio
async def test_profile_with_basic_scheme(async_client):
    response = await async_client.get(
        f"{API}/users/profile", headers={"Authorization": "Basic dXNlcjpwYXNz"}
    )
    assert response.status_code == 401
    assert response.json()["error"] == "Missing or invalid authorization token"


@pytest.mark.asyncio
async def test_logout_revokes_token(async_client, auth_headers):
    response = await async_client.post(f"{API}/auth/logout", headers=auth_headers)
    assert response.status_code == 204

    response = await async_client.get(f"{API}/users/profile", headers=auth_headers)
    assert response.status_code == 401
    assert response.json()["error"] == "Invalid or expired token"


@pytest.mark.asyncio
async def test_logout_is_idempotent(async_client, auth_headers):
    first = await async_client.post(f"{API}/auth/logout", headers=auth_headers)
    second = await async_client.post(f"{API}/auth/logout", headers=auth_headers)
    assert first.status_code == 204
    assert second.status_code == 204

    response = await async_client.get(f"{API}/users/profile", headers=auth_headers)
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_logout_storage_failure_still_succeeds(app, async_client, auth_headers, caplog):
    """A blacklist write failure is logged and the caller still gets 204."""
    failing_add = AsyncMock(side_effect=OperationalError("INSERT", {}, Exception("disk I/O error")))
    with patch.object(app.state.authenticator.blacklist, "add", failing_add):
        response = await async_client.post(f"{API}/auth/logout", headers=auth_headers)

    assert response.status_code == 204
    failing_add.assert_awaited_once()
    assert any(
        record.getMessage() == "Failed to blacklist token on logout" for record in caplog.records
    )


@pytest.mark.asyncio
async def test_logout_without_token(async_client):
    response = await async_client.post(f"{API}/auth/logout")
    assert response.status_code == 204


@pytest.mark.asyncio
async def test_logout_with_invalid_token(async_client):
    response = await async_client.post(
        f"{API}/auth/logout", headers={"Authorization": "Bearer not-a-jwt"}
    )
    assert response.status_code == 204


@pytest.mark.asyncio
async def test_new_login_after_logout_works(async_client, signed_up_user, auth_headers):
    await async_client.post(f"{API}/auth/logout", headers=auth_headers)
    response = await async_client.post(
        f"{API}/auth/login", json={"username": TEST_USERNAME, "password": TEST_PASSWORD}
    )
    token = response.json()["token"]
    response = await async_client.get(
        f"{API}/users/profile", headers={"Authorization": f"Bearer {token}"}
    )
    assert response.status_code == 200
