"""Image upload route (admin only)."""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from starlette.concurrency import run_in_threadpool

import config
from cms.services.uploads import (
    UploadKind,
    UploadRejected,
    check_image_type,
    read_limited,
    store_image,
)
from web.auth import require_admin
from web.sessions import SessionData

logger = logging.getLogger("sinsane.uploads")

router = APIRouter(prefix="/api", tags=["uploads"])


@router.post("/upload")
async def upload_image(
    image: Optional[UploadFile] = File(None),
    uploadType: Optional[str] = Form(None),
    admin: SessionData = Depends(require_admin),
):
    """Store one image under the directory for uploadType and return its relative path.

    The upload is not linked to any record; callers put the returned path into
    a post thumbnail or loadout screenshots in a follow-up request.
    """
    if image is None or not image.filename:
        raise HTTPException(400, "No file uploaded")
    try:
        kind = UploadKind.parse(uploadType)
        ext = check_image_type(image.filename, image.content_type)
        data = await read_limited(image, config.UPLOAD_MAX_BYTES)
    except UploadRejected as e:
        logger.warning("Upload rejected (%s): %s", image.filename, e)
        raise HTTPException(400, str(e))
    finally:
        await image.close()
    filename, path = await run_in_threadpool(store_image, config.UPLOAD_ROOT, kind, ext, data)
    return {"message": "File uploaded successfully", "filename": filename, "path": path}
