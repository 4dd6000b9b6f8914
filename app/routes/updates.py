from __future__ import annotations

import logging
import re

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile

from app.auth.deps import require_admin, require_same_origin
from app.config import Settings
from app.content.updates import UpdatesRepository
from app.deps import get_settings, get_updates_repository
from app.errors import ContentStoreError, NotFoundError
from app.models.update import SLUG_PATTERN
from app.schemas.updates import (
    DeleteImageIn,
    DeleteUpdateIn,
    SaveUpdateIn,
    SaveUpdateOut,
    SuccessOut,
    UpdatesOut,
    UploadImageOut,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin/api", tags=["updates"])

ALLOWED_IMAGE_TYPES = {"image/jpeg", "image/png", "image/gif", "image/webp"}

def _store_failure(action: str, e: ContentStoreError) -> HTTPException:
    logger.error("%s failed: %s", action, e)
    return HTTPException(status_code=500, detail=str(e) or f"Failed to {action}")

@router.get("/updates", response_model=UpdatesOut)
def list_updates(
    _: str = Depends(require_admin),
    repo: UpdatesRepository = Depends(get_updates_repository),
) -> UpdatesOut:
    try:
        return UpdatesOut(updates=repo.list_updates())
    except ContentStoreError as e:
        raise _store_failure("fetch updates", e)

@router.post("/save-update", response_model=SaveUpdateOut, dependencies=[Depends(require_same_origin)])
def save_update(
    payload: SaveUpdateIn,
    _: str = Depends(require_admin),
    config: Settings = Depends(get_settings),
    repo: UpdatesRepository = Depends(get_updates_repository),
) -> SaveUpdateOut:
    if len(payload.content.encode("utf-8")) > config.max_content_bytes:
        raise HTTPException(
            status_code=400,
            detail=f"Content exceeds maximum size of {config.max_content_bytes // 1024}KB",
        )

    try:
        update, is_new = repo.save_update(
            title=payload.title,
            content=payload.content,
            status=payload.status,
            excerpt=payload.excerpt,
            slug=payload.slug,
        )
    except ContentStoreError as e:
        raise _store_failure("save", e)

    return SaveUpdateOut(slug=update.slug, isNew=is_new)

@router.delete("/delete-update", response_model=SuccessOut, dependencies=[Depends(require_same_origin)])
def delete_update(
    payload: DeleteUpdateIn,
    _: str = Depends(require_admin),
    repo: UpdatesRepository = Depends(get_updates_repository),
) -> SuccessOut:
    try:
        repo.delete_update(payload.slug)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Update not found")
    except ContentStoreError as e:
        raise _store_failure("delete", e)
    return SuccessOut()

def sanitize_filename(name: str) -> str:
    name = re.sub(r"\s+", "-", name).lower()
    return re.sub(r"[^a-z0-9._-]", "", name).lstrip(".")

@router.post("/upload-image", response_model=UploadImageOut, dependencies=[Depends(require_same_origin)])
def upload_image(
    _: str = Depends(require_admin),
    slug: str = Form(default=""),
    image: UploadFile | None = File(default=None),
    config: Settings = Depends(get_settings),
    repo: UpdatesRepository = Depends(get_updates_repository),
) -> UploadImageOut:
    slug = slug.strip()
    if not slug or not re.match(SLUG_PATTERN, slug):
        raise HTTPException(status_code=400, detail="Valid slug is required")

    if image is None:
        raise HTTPException(status_code=400, detail="Image file is required")

    if image.content_type not in ALLOWED_IMAGE_TYPES:
        raise HTTPException(status_code=400, detail="Only JPEG, PNG, GIF, and WebP images are allowed")

    data = image.file.read()
    if len(data) > config.max_image_bytes:
        raise HTTPException(
            status_code=400,
            detail=f"Image exceeds maximum size of {config.max_image_bytes // (1024 * 1024)}MB",
        )

    filename = sanitize_filename(image.filename or "")
    if not filename:
        raise HTTPException(status_code=400, detail="Invalid filename")

    try:
        path = repo.add_image(slug, filename, data)
    except ContentStoreError as e:
        raise _store_failure("upload", e)
    return UploadImageOut(path=path)

@router.delete("/delete-image", response_model=SuccessOut, dependencies=[Depends(require_same_origin)])
def delete_image(
    payload: DeleteImageIn,
    _: str = Depends(require_admin),
    repo: UpdatesRepository = Depends(get_updates_repository),
) -> SuccessOut:
    try:
        repo.remove_image(payload.slug, payload.filename)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Image not found")
    except ContentStoreError as e:
        raise _store_failure("delete image", e)
    return SuccessOut()
