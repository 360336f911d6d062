"""Pytest configuration and fixtures for API tests."""
import os

# Set test env BEFORE any imports that use config
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["INITIAL_ADMIN_PASSWORD"] = "testpass123"
os.environ["INITIAL_ADMIN_USERNAME"] = "admin"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["CORS_ORIGINS"] = ""

import pytest
from httpx import ASGITransport, AsyncClient

import config
from cms.models.base import Base, engine
from web.api.main import app
from web.sessions import InMemorySessionStore, get_session_store


class FakeClock:
    """Manually advanced clock for session expiry tests."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(autouse=True)
async def _init_db():
    """Fresh tables for every test (ASGI lifespan doesn't run with httpx)."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture(autouse=True)
def session_store(clock):
    """Per-test session store, swapped in through the dependency override."""
    store = InMemorySessionStore(config.SESSION_TTL_SECONDS, clock=clock)
    app.dependency_overrides[get_session_store] = lambda: store
    yield store
    app.dependency_overrides.pop(get_session_store, None)


@pytest.fixture
async def client():
    """Async HTTP client for testing the API."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.fixture
def login(client):
    """Return a coroutine that logs in and returns a Cookie header for that session.

    The client's own cookie jar is cleared afterwards so other requests in the
    test stay anonymous unless they pass the returned headers.
    """

    async def _login(username: str, password: str) -> dict:
        r = await client.post("/api/login", json={"username": username, "password": password})
        assert r.status_code == 200, f"Login failed: {r.text}"
        token = r.json()["token"]
        client.cookies.clear()
        return {"Cookie": f"{config.SESSION_COOKIE_NAME}={token}"}

    return _login


@pytest.fixture
async def admin_headers(login):
    """Login as the bootstrapped admin and return the session cookie header."""
    return await login("admin", "testpass123")


@pytest.fixture
async def user_headers(client, login):
    """Register and login a regular (non-admin) user."""
    r = await client.post("/api/register", json={"username": "regular", "password": "secret123"})
    assert r.status_code == 201, r.text
    return await login("regular", "secret123")
