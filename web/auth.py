"""Authentication for web API: password hashing, session lookup, admin guard."""
from __future__ import annotations

import hashlib
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from passlib.context import CryptContext
from sqlalchemy import select
from starlette.concurrency import run_in_threadpool

import config
from cms.models import User
from cms.models.base import async_session_factory
from web.sessions import SessionData, SessionStore, get_session_store

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=config.BCRYPT_ROUNDS,
)


def _prepare_password(password: str) -> str:
    """Bcrypt has a 72-byte limit. Pre-hash longer passwords with SHA256."""
    encoded = password.encode("utf-8")
    if len(encoded) > 72:
        return hashlib.sha256(encoded).hexdigest()
    return password


async def hash_password(password: str) -> str:
    return await run_in_threadpool(pwd_context.hash, _prepare_password(password))


async def verify_password(plain: str, hashed: str) -> bool:
    """False on mismatch. A malformed digest raises (ValueError) instead."""
    return await run_in_threadpool(pwd_context.verify, _prepare_password(plain), hashed)


async def get_user_by_username(username: str) -> Optional[User]:
    async with async_session_factory() as session:
        result = await session.execute(select(User).where(User.username == username))
        return result.scalar_one_or_none()


async def get_current_session(
    request: Request,
    store: SessionStore = Depends(get_session_store),
) -> Optional[SessionData]:
    """Return the active session from the session cookie, or None if not logged in."""
    token = request.cookies.get(config.SESSION_COOKIE_NAME)
    if not token:
        return None
    return await store.get(token)


async def require_admin(
    current: Optional[SessionData] = Depends(get_current_session),
) -> SessionData:
    """Dependency: require an active admin session. Raises 403 without touching the database."""
    if current is None or not current.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return current
