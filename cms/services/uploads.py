"""Image upload validation and storage."""
from __future__ import annotations

import enum
import logging
import secrets
import time
from pathlib import Path
from typing import Optional

logger = logging.getLogger("sinsane.uploads")

ALLOWED_EXTENSIONS = {"jpeg", "jpg", "png", "gif", "webp"}
CHUNK_SIZE = 1024 * 1024


class UploadRejected(Exception):
    """File refused before anything is written to disk."""


class UploadKind(str, enum.Enum):
    """Upload type tag sent by the client. Each kind owns one directory."""

    ARTICLE = "article"
    SKIN = "skin"

    @property
    def directory(self) -> str:
        return _DIRECTORIES[self]

    @classmethod
    def parse(cls, value: Optional[str]) -> "UploadKind":
        """Missing tag means an article image; anything unknown is refused."""
        if not value:
            return cls.ARTICLE
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise UploadRejected(f"Unknown upload type: {value}") from None


_DIRECTORIES = {
    UploadKind.ARTICLE: "articles/img",
    UploadKind.SKIN: "skins/img",
}


def check_image_type(filename: Optional[str], content_type: Optional[str]) -> str:
    """Validate extension and declared MIME type (parameters ignored). Returns the original extension (with dot)."""
    ext = Path(filename or "").suffix
    if ext.lower().lstrip(".") not in ALLOWED_EXTENSIONS:
        raise UploadRejected("Only image files are allowed!")
    mime = (content_type or "").split(";", 1)[0].strip().lower()
    major, _, minor = mime.partition("/")
    if major != "image" or minor not in ALLOWED_EXTENSIONS:
        raise UploadRejected("Only image files are allowed!")
    return ext


def generate_filename(ext: str) -> str:
    """Timestamp plus random suffix, e.g. 1718000000000-483920117.png."""
    return f"{int(time.time() * 1000)}-{secrets.randbelow(10**9)}{ext}"


async def read_limited(upload, max_bytes: int) -> bytes:
    """Read an UploadFile in chunks, refusing it as soon as it crosses max_bytes."""
    chunks = []
    size = 0
    while True:
        chunk = await upload.read(CHUNK_SIZE)
        if not chunk:
            break
        size += len(chunk)
        if size > max_bytes:
            raise UploadRejected("File too large")
        chunks.append(chunk)
    return b"".join(chunks)


def store_image(root: Path, kind: UploadKind, ext: str, data: bytes) -> tuple[str, str]:
    """Write data under root/<kind dir>/ with a generated name. Returns (filename, relative path)."""
    target_dir = Path(root) / kind.directory
    target_dir.mkdir(parents=True, exist_ok=True)
    filename = generate_filename(ext)
    (target_dir / filename).write_bytes(data)
    rel_path = f"{kind.directory}/{filename}"
    logger.info("Stored %s upload %s (%d bytes)", kind.value, rel_path, len(data))
    return filename, rel_path
