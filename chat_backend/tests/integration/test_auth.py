import datetime

from unittest.mock import AsyncMock

import pytest
import redis
from httpx import ASGITransport, AsyncClient

from chat_backend.domain.entities import Identity
from chat_backend.main import Application
from chat_backend.tests.fakes import TEST_PASSWORD

pytestmark = pytest.mark.asyncio


def registration(**overrides):
    payload = {
        "username": "newuser",
        "email": "newuser@example.com",
        "displayName": "New User",
        "password": "newpassword",
    }
    payload.update(overrides)
    return payload


async def test_register_user(client: AsyncClient):
    response = await client.post("/api/v1/auth/register", json=registration())

    assert response.status_code == 201
    body = response.json()
    assert body["tokenType"] == "bearer"
    assert body["accessToken"]
    assert body["expiresAt"]
    assert body["user"]["username"] == "newuser"
    assert body["user"]["displayName"] == "New User"
    assert body["user"]["isOnline"] is False
    assert "password" not in body["user"]
    assert "hashedPassword" not in body["user"]


async def test_registered_token_authenticates(client: AsyncClient):
    response = await client.post("/api/v1/auth/register", json=registration())
    token = response.json()["accessToken"]

    me = await client.get(
        "/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"}
    )

    assert me.status_code == 200
    assert me.json()["email"] == "newuser@example.com"


async def test_register_duplicate_username(client: AsyncClient, alice):
    response = await client.post(
        "/api/v1/auth/register",
        json=registration(username=alice.username, email="another@example.com"),
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Username is already taken"


async def test_register_duplicate_email(client: AsyncClient, alice):
    response = await client.post(
        "/api/v1/auth/register",
        json=registration(username="uniqueuser", email=alice.email.upper()),
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "User with this email already exists"


@pytest.mark.parametrize(
    "overrides",
    [
        {"email": "notanemail"},
        {"password": "short"},
        {"username": "No Spaces"},
        {"username": "ab"},
        {"displayName": "x"},
    ],
)
async def test_register_invalid_payload(client: AsyncClient, overrides):
    response = await client.post(
        "/api/v1/auth/register", json=registration(**overrides)
    )
    assert response.status_code == 422


@pytest.mark.parametrize("login", ["alice", "alice@example.com", "ALICE"])
async def test_login_user(client: AsyncClient, alice, login):
    response = await client.post(
        "/api/v1/auth/login", data={"username": login, "password": TEST_PASSWORD}
    )
    assert response.status_code == 200
    body = response.json()
    assert body["tokenType"] == "bearer"
    assert body["user"]["id"] == alice.id


async def test_login_does_not_mark_user_online(client: AsyncClient, alice):
    response = await client.post(
        "/api/v1/auth/login", data={"username": "alice", "password": TEST_PASSWORD}
    )
    assert response.json()["user"]["isOnline"] is False


@pytest.mark.parametrize(
    "username, password",
    [("nonexistentuser", "wrongpassword"), ("alice", "wrongpassword")],
)
async def test_login_invalid_credentials(client: AsyncClient, alice, username, password):
    response = await client.post(
        "/api/v1/auth/login", data={"username": username, "password": password}
    )
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid username/email or password"
    assert response.headers["www-authenticate"] == "Bearer"


async def test_me_requires_token(client: AsyncClient):
    response = await client.get("/api/v1/auth/me")
    assert response.status_code == 401


async def test_me_rejects_invalid_token(client: AsyncClient):
    response = await client.get(
        "/api/v1/auth/me", headers={"Authorization": "Bearer invalid_token"}
    )
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid authentication token"


async def test_access_token_expiration(client: AsyncClient, alice, security_service):
    token, _ = security_service.create_access_token(
        Identity(user_id=alice.id, username=alice.username, email=alice.email),
        expires_delta=datetime.timedelta(seconds=-1),
    )
    response = await client.get(
        "/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"}
    )
    assert response.status_code == 401
    assert response.json()["detail"] == "Authentication token has expired"


async def test_token_for_unknown_user(client: AsyncClient, security_service):
    token, _ = security_service.create_access_token(
        Identity(user_id=999, username="ghost", email="ghost@example.com")
    )
    response = await client.get(
        "/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"}
    )
    assert response.status_code == 401


async def test_logout(client: AsyncClient, alice, auth_headers):
    response = await client.post("/api/v1/auth/logout", headers=auth_headers(alice))

    assert response.status_code == 200
    assert response.json() == {"message": "Logout successful"}

    me = await client.get("/api/v1/auth/me", headers=auth_headers(alice))
    assert me.json()["isOnline"] is False
    assert me.json()["lastSeen"] is not None


async def test_logout_invalid_token(client: AsyncClient):
    response = await client.post(
        "/api/v1/auth/logout", headers={"Authorization": "Bearer invalid_token"}
    )
    assert response.status_code == 401


async def test_root_and_health(client: AsyncClient):
    root = await client.get("/")
    health = await client.get("/health")

    assert root.status_code == 200
    assert health.json() == {
        "status": "ok",
        "presenceBackend": "memory",
        "liveConnections": 0,
    }


@pytest.fixture
async def redis_backed_client(app_config, database, redis_client):
    application = Application(
        config=app_config.model_copy(update={"PRESENCE_BACKEND": "redis"})
    )
    application.database = database
    application.redis_client = redis_client
    app = application.create_app()
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac


async def test_health_reports_redis(redis_backed_client: AsyncClient, mock_redis, monkeypatch):
    healthy = await redis_backed_client.get("/health")

    assert healthy.json() == {
        "status": "ok",
        "presenceBackend": "redis",
        "liveConnections": 0,
        "redis": True,
    }

    monkeypatch.setattr(
        mock_redis, "ping", AsyncMock(side_effect=redis.ConnectionError("down"))
    )
    degraded = await redis_backed_client.get("/health")

    assert degraded.json()["status"] == "degraded"
    assert degraded.json()["redis"] is False
