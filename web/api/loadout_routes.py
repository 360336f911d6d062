"""Loadout catalogue routes: public listing, admin CRUD."""
from __future__ import annotations

from datetime import datetime
from typing import Optional, Union

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy import select

from cms.models import LoadoutItem
from cms.models.base import async_session_factory
from web.api.utils import not_found, optional_text, require_fields
from web.auth import require_admin
from web.sessions import SessionData

public_router = APIRouter(prefix="/api/loadout", tags=["loadout"])
admin_router = APIRouter(prefix="/api/admin/loadout", tags=["admin"])


class LoadoutItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    weapon_name: str
    skin_name: str
    category: str
    side: str
    description: Optional[str]
    float_value: Optional[str]
    stattrak: bool
    screenshots: list[str]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]


class LoadoutListResponse(BaseModel):
    items: list[LoadoutItemResponse]


class LoadoutWrite(BaseModel):
    weapon_name: Optional[str] = None
    skin_name: Optional[str] = None
    category: Optional[str] = None
    side: Optional[str] = None
    description: Optional[str] = None
    float_value: Optional[Union[str, float]] = None
    stattrak: bool = False
    screenshots: Optional[list[str]] = None

    def validate_required(self) -> None:
        require_fields(self.weapon_name, self.skin_name, self.category, self.side)

    def apply(self, item: LoadoutItem) -> None:
        item.weapon_name = self.weapon_name
        item.skin_name = self.skin_name
        item.category = self.category
        item.side = self.side
        item.description = self.description
        item.float_value = optional_text(self.float_value)
        item.stattrak = self.stattrak
        item.screenshots = self.screenshots


class LoadoutCreated(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str
    item_id: int = Field(alias="itemId")


async def _list_items() -> LoadoutListResponse:
    async with async_session_factory() as session:
        result = await session.execute(
            select(LoadoutItem).order_by(LoadoutItem.category, LoadoutItem.weapon_name)
        )
        items = result.scalars().all()
        return LoadoutListResponse(items=[LoadoutItemResponse.model_validate(i) for i in items])


@public_router.get("", response_model=LoadoutListResponse)
async def list_loadout():
    """Every loadout item, grouped by category then weapon name."""
    return await _list_items()


@admin_router.get("", response_model=LoadoutListResponse)
async def admin_list_loadout(admin: SessionData = Depends(require_admin)):
    return await _list_items()


@admin_router.post("", status_code=201, response_model=LoadoutCreated)
async def create_loadout_item(body: LoadoutWrite, admin: SessionData = Depends(require_admin)):
    body.validate_required()
    async with async_session_factory() as session:
        item = LoadoutItem()
        body.apply(item)
        session.add(item)
        await session.commit()
        return LoadoutCreated(message="Loadout item created successfully", item_id=item.id)


@admin_router.put("/{item_id}")
async def update_loadout_item(item_id: int, body: LoadoutWrite, admin: SessionData = Depends(require_admin)):
    body.validate_required()
    async with async_session_factory() as session:
        item = await session.get(LoadoutItem, item_id)
        if not item:
            raise not_found("Loadout item")
        body.apply(item)
        await session.commit()
        return {"message": "Loadout item updated successfully"}


@admin_router.delete("/{item_id}")
async def delete_loadout_item(item_id: int, admin: SessionData = Depends(require_admin)):
    async with async_session_factory() as session:
        item = await session.get(LoadoutItem, item_id)
        if not item:
            raise not_found("Loadout item")
        await session.delete(item)
        await session.commit()
        return {"message": "Loadout item deleted successfully"}
