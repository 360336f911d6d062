"""Database models."""
from cms.models.base import Base, init_db
from cms.models.changelog import ChangelogEntry
from cms.models.loadout import LoadoutItem
from cms.models.post import BlogPost
from cms.models.user import User

__all__ = [
    "Base",
    "BlogPost",
    "ChangelogEntry",
    "LoadoutItem",
    "User",
    "init_db",
]
