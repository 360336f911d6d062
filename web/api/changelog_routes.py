"""Changelog routes: public listing, admin CRUD."""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy import select

from cms.models import ChangelogEntry
from cms.models.base import async_session_factory
from web.api.utils import not_found, require_fields
from web.auth import require_admin
from web.sessions import SessionData

public_router = APIRouter(prefix="/api/changelog", tags=["changelog"])
admin_router = APIRouter(prefix="/api/admin/changelog", tags=["admin"])


class ChangelogEntryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    version: str
    date: str
    added: Optional[str]
    changed: Optional[str]
    fixed: Optional[str]
    removed: Optional[str]
    created_at: Optional[datetime]


class ChangelogListResponse(BaseModel):
    entries: list[ChangelogEntryResponse]


class ChangelogWrite(BaseModel):
    version: Optional[str] = None
    date: Optional[str] = None
    added: Optional[str] = None
    changed: Optional[str] = None
    fixed: Optional[str] = None
    removed: Optional[str] = None

    def validate_required(self) -> None:
        require_fields(self.version, self.date, detail="Version and date are required")

    def apply(self, entry: ChangelogEntry) -> None:
        entry.version = self.version
        entry.date = self.date
        entry.added = self.added
        entry.changed = self.changed
        entry.fixed = self.fixed
        entry.removed = self.removed


class ChangelogCreated(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str
    entry_id: int = Field(alias="entryId")


async def _list_entries() -> ChangelogListResponse:
    async with async_session_factory() as session:
        result = await session.execute(select(ChangelogEntry).order_by(ChangelogEntry.date.desc()))
        entries = result.scalars().all()
        return ChangelogListResponse(entries=[ChangelogEntryResponse.model_validate(e) for e in entries])


@public_router.get("", response_model=ChangelogListResponse)
async def list_changelog():
    return await _list_entries()


@admin_router.get("", response_model=ChangelogListResponse)
async def admin_list_changelog(admin: SessionData = Depends(require_admin)):
    return await _list_entries()


@admin_router.post("", status_code=201, response_model=ChangelogCreated)
async def create_changelog_entry(body: ChangelogWrite, admin: SessionData = Depends(require_admin)):
    body.validate_required()
    async with async_session_factory() as session:
        entry = ChangelogEntry()
        body.apply(entry)
        session.add(entry)
        await session.commit()
        return ChangelogCreated(message="Changelog entry created successfully", entry_id=entry.id)


@admin_router.put("/{entry_id}")
async def update_changelog_entry(entry_id: int, body: ChangelogWrite, admin: SessionData = Depends(require_admin)):
    body.validate_required()
    async with async_session_factory() as session:
        entry = await session.get(ChangelogEntry, entry_id)
        if not entry:
            raise not_found("Changelog entry")
        body.apply(entry)
        await session.commit()
        return {"message": "Changelog entry updated successfully"}


@admin_router.delete("/{entry_id}")
async def delete_changelog_entry(entry_id: int, admin: SessionData = Depends(require_admin)):
    async with async_session_factory() as session:
        entry = await session.get(ChangelogEntry, entry_id)
        if not entry:
            raise not_found("Changelog entry")
        await session.delete(entry)
        await session.commit()
        return {"message": "Changelog entry deleted successfully"}
