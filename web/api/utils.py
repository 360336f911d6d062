"""Shared API utilities."""
from __future__ import annotations

from typing import Any

from fastapi import HTTPException


def require_fields(*values: Any, detail: str = "Missing required fields") -> None:
    """Raise 400 if any value is missing or blank. Nothing is written when this fails."""
    for value in values:
        if value is None or (isinstance(value, str) and not value.strip()):
            raise HTTPException(status_code=400, detail=detail)


def not_found(entity: str) -> HTTPException:
    return HTTPException(status_code=404, detail=f"{entity} not found")


def optional_text(value: Any) -> str | None:
    """Normalise optional free-text/numeric input to a stored string (None stays None)."""
    if value is None:
        return None
    return str(value)
