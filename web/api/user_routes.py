"""Admin user management: list, rename, delete, bulk delete."""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError

from cms.models import User
from cms.models.base import async_session_factory
from web.api.utils import not_found
from web.auth import require_admin
from web.sessions import SessionData, SessionStore, get_session_store

logger = logging.getLogger("sinsane.users")

router = APIRouter(prefix="/api/admin/users", tags=["admin"])

CANNOT_DELETE_SELF = "Cannot delete your own account"


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    is_admin: bool
    created_at: Optional[datetime]


class UserListResponse(BaseModel):
    users: list[UserResponse]


class UpdateUserRequest(BaseModel):
    username: Optional[str] = None


class BulkDeleteRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_ids: Optional[list[int]] = Field(default=None, alias="userIds")


@router.get("", response_model=UserListResponse)
async def list_users(admin: SessionData = Depends(require_admin)):
    """All users, newest first. Password digests are never returned."""
    async with async_session_factory() as session:
        result = await session.execute(select(User).order_by(User.created_at.desc(), User.id.desc()))
        return UserListResponse(users=[UserResponse.model_validate(u) for u in result.scalars().all()])


@router.put("/{user_id}")
async def update_user(user_id: int, body: UpdateUserRequest, admin: SessionData = Depends(require_admin)):
    """Rename a user. Username is the only editable field."""
    if not body.username:
        raise HTTPException(400, "Username is required")
    if len(body.username) < 3:
        raise HTTPException(400, "Username must be at least 3 characters")
    async with async_session_factory() as session:
        user = await session.get(User, user_id)
        if not user:
            raise not_found("User")
        user.username = body.username
        try:
            await session.commit()
        except IntegrityError:
            await session.rollback()
            raise HTTPException(400, "Username already exists")
        return {"message": "User updated successfully"}


@router.delete("/{user_id}")
async def delete_user(
    user_id: int,
    admin: SessionData = Depends(require_admin),
    store: SessionStore = Depends(get_session_store),
):
    """Delete a user (admin only) and end their sessions. Cannot delete self."""
    if user_id == admin.user_id:
        raise HTTPException(400, CANNOT_DELETE_SELF)
    async with async_session_factory() as session:
        user = await session.get(User, user_id)
        if not user:
            raise not_found("User")
        await session.delete(user)
        await session.commit()
    await store.destroy_for_user(user_id)
    logger.info("Admin %s deleted user id=%s", admin.username, user_id)
    return {"message": "User deleted successfully"}


@router.post("/bulk-delete")
async def bulk_delete_users(
    body: BulkDeleteRequest,
    admin: SessionData = Depends(require_admin),
    store: SessionStore = Depends(get_session_store),
):
    """Delete several users at once. Returns how many rows were actually removed."""
    if not body.user_ids:
        raise HTTPException(400, "No users selected")
    if admin.user_id in body.user_ids:
        raise HTTPException(400, CANNOT_DELETE_SELF)
    async with async_session_factory() as session:
        result = await session.execute(delete(User).where(User.id.in_(body.user_ids)))
        await session.commit()
        count = result.rowcount
    for user_id in body.user_ids:
        await store.destroy_for_user(user_id)
    logger.info("Admin %s bulk-deleted %d user(s)", admin.username, count)
    return {"message": f"{count} user(s) deleted successfully", "count": count}
