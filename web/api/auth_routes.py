"""Auth API routes: register, login, logout, session status."""
from __future__ import annotations

import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.exc import IntegrityError

import config
from cms.models import User
from cms.models.base import async_session_factory
from web.auth import (
    get_current_session,
    get_user_by_username,
    hash_password,
    verify_password,
)
from web.sessions import SessionData, SessionStore, get_session_store

logger = logging.getLogger("sinsane.auth")

router = APIRouter(prefix="/api", tags=["auth"])


class Credentials(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None


class RegisterResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str
    user_id: int = Field(alias="userId")


class LoginResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str
    token: str  # the session id; authorization itself rides on the cookie
    username: str
    is_admin: bool = Field(alias="isAdmin")


class StatusResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    authenticated: bool
    username: Optional[str] = None
    is_admin: Optional[bool] = Field(default=None, alias="isAdmin")


@router.post("/register", status_code=201, response_model=RegisterResponse)
async def register(body: Credentials):
    """Create a regular (non-admin) account."""
    if not body.username or not body.password:
        raise HTTPException(400, "Username and password required")
    if len(body.username) < 3:
        raise HTTPException(400, "Username must be at least 3 characters")
    if len(body.password) < 6:
        raise HTTPException(400, "Password must be at least 6 characters")
    password_hash = await hash_password(body.password)
    async with async_session_factory() as session:
        user = User(username=body.username, password=password_hash, is_admin=False)
        session.add(user)
        try:
            await session.commit()
        except IntegrityError:
            await session.rollback()
            raise HTTPException(400, "Username already exists")
        await session.refresh(user)
    logger.info("Registered user %s (id=%s)", user.username, user.id)
    return RegisterResponse(message="User registered successfully", user_id=user.id)


_bootstrap_lock = asyncio.Lock()


async def _existing_admin(username: str, password: str) -> Optional[User]:
    user = await get_user_by_username(username)
    if user is not None and await verify_password(password, user.password):
        return user
    return None


async def _bootstrap_admin(username: str, password: str) -> Optional[User]:
    """Create the initial admin on first login when INITIAL_ADMIN_PASSWORD is configured.

    Concurrent first logins are serialised; the losers log in as the admin the
    winner created.
    """
    if not (
        config.INITIAL_ADMIN_PASSWORD
        and username == config.INITIAL_ADMIN_USERNAME
        and password == config.INITIAL_ADMIN_PASSWORD
    ):
        return None
    async with _bootstrap_lock:
        if await get_user_by_username(username) is not None:
            return await _existing_admin(username, password)
        async with async_session_factory() as session:
            user = User(
                username=config.INITIAL_ADMIN_USERNAME,
                password=await hash_password(config.INITIAL_ADMIN_PASSWORD),
                is_admin=True,
            )
            session.add(user)
            try:
                await session.commit()
            except IntegrityError:
                # Created by another worker process in the meantime.
                await session.rollback()
                return await _existing_admin(username, password)
            await session.refresh(user)
    logger.info("Bootstrapped initial admin %s", user.username)
    return user


@router.post("/login", response_model=LoginResponse)
async def login(
    body: Credentials,
    response: Response,
    store: SessionStore = Depends(get_session_store),
):
    """Verify credentials, open a session and set the session cookie."""
    if not body.username or not body.password:
        raise HTTPException(400, "Username and password required")
    user = await get_user_by_username(body.username)
    if user is None:
        user = await _bootstrap_admin(body.username, body.password)
        if user is None:
            logger.info("Login failed for unknown user %s", body.username)
            raise HTTPException(401, "Invalid credentials")
    elif not await verify_password(body.password, user.password):
        logger.info("Login failed for %s: wrong password", body.username)
        raise HTTPException(401, "Invalid credentials")

    current = await store.create(user.id, user.username, user.is_admin)
    response.set_cookie(
        key=config.SESSION_COOKIE_NAME,
        value=current.token,
        max_age=store.ttl_seconds,
        httponly=True,
        samesite="lax",
        secure=config.SESSION_COOKIE_SECURE,
    )
    logger.info("Login successful for %s (admin=%s)", user.username, user.is_admin)
    return LoginResponse(
        message="Login successful",
        token=current.token,
        username=user.username,
        is_admin=user.is_admin,
    )


@router.post("/logout")
async def logout(
    request: Request,
    response: Response,
    store: SessionStore = Depends(get_session_store),
):
    """Destroy the current session, if any, and clear the cookie."""
    token = request.cookies.get(config.SESSION_COOKIE_NAME)
    if token and await store.destroy(token):
        logger.info("Session closed")
    response.delete_cookie(config.SESSION_COOKIE_NAME)
    return {"message": "Logged out successfully"}


@router.get("/auth/status", response_model=StatusResponse, response_model_exclude_none=True)
async def auth_status(current: Optional[SessionData] = Depends(get_current_session)):
    """Report whether the caller holds an active session. For frontend auth checks."""
    if current is None:
        return StatusResponse(authenticated=False)
    return StatusResponse(authenticated=True, username=current.username, is_admin=current.is_admin)
