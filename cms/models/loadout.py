"""Loadout catalogue model."""
from __future__ import annotations

import json
from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from cms.models.base import Base


class LoadoutItem(Base):
    """Weapon skin in the loadout, with optional screenshots."""

    __tablename__ = "loadout_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    weapon_name: Mapped[str] = mapped_column(String(128), nullable=False)
    skin_name: Mapped[str] = mapped_column(String(128), nullable=False)
    category: Mapped[str] = mapped_column(String(64), nullable=False)
    side: Mapped[str] = mapped_column(String(32), nullable=False)  # T, CT, Both
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    float_value: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    stattrak: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    screenshots_json: Mapped[Optional[str]] = mapped_column("screenshots", Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @property
    def screenshots(self) -> list[str]:
        """Ordered screenshot paths. NULL or empty column reads as an empty list."""
        if not self.screenshots_json:
            return []
        return list(json.loads(self.screenshots_json))

    @screenshots.setter
    def screenshots(self, value: Optional[list[str]]) -> None:
        self.screenshots_json = json.dumps(list(value or []))
