"""Tests for health, registration, login and session status."""
import asyncio

import pytest
from sqlalchemy import select

import config
from cms.models import User
from cms.models.base import async_session_factory


@pytest.mark.asyncio
async def test_health(client):
    """Health endpoint returns ok."""
    r = await client.get("/api/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


@pytest.mark.asyncio
async def test_register(client):
    r = await client.post("/api/register", json={"username": "alice", "password": "hunter22"})
    assert r.status_code == 201
    data = r.json()
    assert data["message"] == "User registered successfully"
    assert isinstance(data["userId"], int)


@pytest.mark.asyncio
async def test_register_duplicate_username(client):
    """Second registration with the same name conflicts; stored password is a digest."""
    r = await client.post("/api/register", json={"username": "alice", "password": "hunter22"})
    assert r.status_code == 201
    r = await client.post("/api/register", json={"username": "alice", "password": "another1"})
    assert r.status_code == 400
    assert r.json() == {"error": "Username already exists"}

    async with async_session_factory() as session:
        result = await session.execute(select(User).where(User.username == "alice"))
        users = result.scalars().all()
    assert len(users) == 1
    assert users[0].password != "hunter22"
    assert users[0].password.startswith("$2")
    assert users[0].is_admin is False


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body, error",
    [
        ({}, "Username and password required"),
        ({"username": "bob"}, "Username and password required"),
        ({"username": "ab", "password": "secret123"}, "Username must be at least 3 characters"),
        ({"username": "bob", "password": "12345"}, "Password must be at least 6 characters"),
    ],
)
async def test_register_validation(client, body, error):
    r = await client.post("/api/register", json=body)
    assert r.status_code == 400
    assert r.json() == {"error": error}


@pytest.mark.asyncio
async def test_login_sets_session_cookie(client):
    r = await client.post("/api/login", json={"username": "admin", "password": "testpass123"})
    assert r.status_code == 200
    data = r.json()
    assert data["message"] == "Login successful"
    assert data["username"] == "admin"
    assert data["isAdmin"] is True
    assert r.cookies.get(config.SESSION_COOKIE_NAME) == data["token"]


@pytest.mark.asyncio
async def test_login_wrong_password(client):
    """Wrong password is 401 even for an existing user."""
    await client.post("/api/register", json={"username": "carol", "password": "rightpass"})
    r = await client.post("/api/login", json={"username": "carol", "password": "wrongpass"})
    assert r.status_code == 401
    assert r.json() == {"error": "Invalid credentials"}


@pytest.mark.asyncio
async def test_login_unknown_user(client):
    r = await client.post("/api/login", json={"username": "nobody", "password": "whatever"})
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_login_missing_fields(client):
    r = await client.post("/api/login", json={"username": "admin"})
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_auth_status(client, login):
    r = await client.get("/api/auth/status")
    assert r.json() == {"authenticated": False}

    headers = await login("admin", "testpass123")
    r = await client.get("/api/auth/status", headers=headers)
    assert r.json() == {"authenticated": True, "username": "admin", "isAdmin": True}


@pytest.mark.asyncio
async def test_logout_destroys_session(client, admin_headers, session_store):
    assert len(session_store) == 1
    r = await client.post("/api/logout", headers=admin_headers)
    assert r.status_code == 200
    assert r.json() == {"message": "Logged out successfully"}
    assert len(session_store) == 0

    r = await client.get("/api/admin/posts", headers=admin_headers)
    assert r.status_code == 403


@pytest.mark.asyncio
async def test_logout_without_session(client):
    r = await client.post("/api/logout")
    assert r.status_code == 200


@pytest.mark.asyncio
async def test_admin_routes_require_admin(client, user_headers):
    """No session and non-admin sessions both get 403."""
    for path in ("/api/admin/posts", "/api/admin/loadout", "/api/admin/users", "/api/admin/changelog"):
        r = await client.get(path)
        assert r.status_code == 403, path
        assert r.json() == {"error": "Admin access required"}
        r = await client.get(path, headers=user_headers)
        assert r.status_code == 403, path


@pytest.mark.asyncio
async def test_session_expires_after_ttl(client, admin_headers, clock):
    r = await client.get("/api/admin/posts", headers=admin_headers)
    assert r.status_code == 200

    clock.advance(config.SESSION_TTL_SECONDS - 1)
    r = await client.get("/api/admin/posts", headers=admin_headers)
    assert r.status_code == 200

    clock.advance(2)
    r = await client.get("/api/admin/posts", headers=admin_headers)
    assert r.status_code == 403
    r = await client.get("/api/auth/status", headers=admin_headers)
    assert r.json() == {"authenticated": False}


@pytest.mark.asyncio
async def test_bearer_token_is_not_a_credential(client):
    r = await client.post("/api/login", json={"username": "admin", "password": "testpass123"})
    token = r.json()["token"]
    client.cookies.clear()
    r = await client.get("/api/admin/posts", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 403


@pytest.mark.asyncio
async def test_concurrent_first_admin_logins(client):
    """Simultaneous first logins with the initial admin credentials all succeed."""
    creds = {"username": config.INITIAL_ADMIN_USERNAME, "password": config.INITIAL_ADMIN_PASSWORD}
    responses = await asyncio.gather(*(client.post("/api/login", json=creds) for _ in range(3)))
    assert [r.status_code for r in responses] == [200, 200, 200]
    assert all(r.json()["isAdmin"] is True for r in responses)

    async with async_session_factory() as session:
        result = await session.execute(select(User).where(User.username == config.INITIAL_ADMIN_USERNAME))
        assert len(result.scalars().all()) == 1


@pytest.mark.asyncio
async def test_initial_admin_password_must_match_existing_admin(client):
    creds = {"username": config.INITIAL_ADMIN_USERNAME, "password": config.INITIAL_ADMIN_PASSWORD}
    assert (await client.post("/api/login", json=creds)).status_code == 200
    r = await client.post("/api/login", json={**creds, "password": "wrong-password"})
    assert r.status_code == 401
