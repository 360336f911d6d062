"""Changelog entry model."""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from cms.models.base import Base


class ChangelogEntry(Base):
    """One released version. Section fields are free text (usually one line per change)."""

    __tablename__ = "changelog"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    version: Mapped[str] = mapped_column(String(32), nullable=False)
    date: Mapped[str] = mapped_column(String(32), nullable=False)
    added: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    changed: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    fixed: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    removed: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
