"""Server-side session store keyed by an opaque cookie token."""
from __future__ import annotations

import abc
import asyncio
import logging
import secrets
import time
from typing import Callable, Optional

from pydantic import BaseModel, ConfigDict

import config

logger = logging.getLogger("sinsane.sessions")


class SessionData(BaseModel):
    model_config = ConfigDict(frozen=True)

    token: str
    user_id: int
    username: str
    is_admin: bool
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


class SessionStore(abc.ABC):
    """Storage for active sessions. Expiry is absolute, fixed when the session is created."""

    def __init__(self, ttl_seconds: int, clock: Callable[[], float] = time.time):
        self.ttl_seconds = ttl_seconds
        self.clock = clock

    @abc.abstractmethod
    async def get(self, token: str) -> Optional[SessionData]:
        """Return the active session for token, or None if absent or expired."""

    @abc.abstractmethod
    async def put(self, session: SessionData) -> None:
        ...

    @abc.abstractmethod
    async def destroy(self, token: str) -> bool:
        """Remove the session. Returns whether one existed."""

    @abc.abstractmethod
    async def destroy_for_user(self, user_id: int) -> int:
        """Remove every session belonging to user_id. Returns how many were removed."""

    @abc.abstractmethod
    async def sweep_expired(self) -> int:
        """Drop every expired session. Returns how many were removed."""

    async def create(self, user_id: int, username: str, is_admin: bool) -> SessionData:
        session = SessionData(
            token=secrets.token_urlsafe(32),
            user_id=user_id,
            username=username,
            is_admin=is_admin,
            expires_at=self.clock() + self.ttl_seconds,
        )
        await self.put(session)
        return session


class InMemorySessionStore(SessionStore):
    """Process-local store. Safe for concurrent requests on one event loop."""

    def __init__(self, ttl_seconds: int, clock: Callable[[], float] = time.time):
        super().__init__(ttl_seconds, clock)
        self._sessions: dict[str, SessionData] = {}
        self._lock = asyncio.Lock()

    async def get(self, token: str) -> Optional[SessionData]:
        async with self._lock:
            session = self._sessions.get(token)
            if session is None:
                return None
            if session.is_expired(self.clock()):
                del self._sessions[token]
                return None
            return session

    async def put(self, session: SessionData) -> None:
        async with self._lock:
            self._sessions[session.token] = session

    async def destroy(self, token: str) -> bool:
        async with self._lock:
            return self._sessions.pop(token, None) is not None

    async def destroy_for_user(self, user_id: int) -> int:
        async with self._lock:
            tokens = [t for t, s in self._sessions.items() if s.user_id == user_id]
            for token in tokens:
                del self._sessions[token]
            return len(tokens)

    async def sweep_expired(self) -> int:
        async with self._lock:
            now = self.clock()
            expired = [t for t, s in self._sessions.items() if s.is_expired(now)]
            for token in expired:
                del self._sessions[token]
            return len(expired)

    def __len__(self) -> int:
        return len(self._sessions)


session_store: SessionStore = InMemorySessionStore(config.SESSION_TTL_SECONDS)


def get_session_store() -> SessionStore:
    """Dependency: the process-wide store. Override via app.dependency_overrides to swap backends."""
    return session_store


async def sweep_sessions_forever(store: SessionStore, interval: float) -> None:
    """Periodically purge expired sessions. Runs until cancelled."""
    while True:
        await asyncio.sleep(interval)
        removed = await store.sweep_expired()
        if removed:
            logger.info("Swept %d expired session(s)", removed)
