"""Configuration for the sinsane content backend."""
from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

_root = Path(__file__).parent

# Database
DATABASE_URL = os.getenv(
    "DATABASE_URL",
    f"sqlite+aiosqlite:///{_root / 'sinsane.db'}",
)


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def _parse_list(value: str) -> list[str]:
    if not value:
        return []
    return [x.strip() for x in value.split(",") if x.strip()]


# Sessions (opaque token in a cookie, absolute lifetime fixed at login)
SESSION_COOKIE_NAME = os.getenv("SESSION_COOKIE_NAME", "sinsane_session")
SESSION_TTL_SECONDS = int(os.getenv("SESSION_TTL_SECONDS", str(24 * 60 * 60)))
SESSION_SWEEP_INTERVAL_SECONDS = int(os.getenv("SESSION_SWEEP_INTERVAL_SECONDS", "300"))
SESSION_COOKIE_SECURE = _parse_bool(os.getenv("SESSION_COOKIE_SECURE", "false"))

# Password hashing work factor
BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "10"))

# Uploads
UPLOAD_ROOT = Path(os.getenv("UPLOAD_ROOT", str(_root / "public")))
UPLOAD_MAX_BYTES = int(os.getenv("UPLOAD_MAX_BYTES", str(10 * 1024 * 1024)))
# Headroom for multipart boundaries and the uploadType field on top of the file itself.
UPLOAD_FORM_OVERHEAD_BYTES = int(os.getenv("UPLOAD_FORM_OVERHEAD_BYTES", str(64 * 1024)))

# Initial admin bootstrap (first login with these credentials creates the admin)
INITIAL_ADMIN_USERNAME = os.getenv("INITIAL_ADMIN_USERNAME", "admin")
INITIAL_ADMIN_PASSWORD = os.getenv("INITIAL_ADMIN_PASSWORD", "")  # Set to bootstrap first admin

# Web server
CORS_ORIGINS = _parse_list(os.getenv("CORS_ORIGINS", ""))
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "3000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
