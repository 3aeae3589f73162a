"""Admin media gallery: locally stored uploads and the Cloudinary folder."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from artgallery.config import Settings, get_settings
from artgallery.handlers.forms import form_files
from artgallery.services.auth import require_admin
from artgallery.services.images import ImageResolver, get_image_resolver
from artgallery.services.storage import (
    CloudinaryStorage,
    LocalUploadStorage,
    RemoteStorageError,
    UploadError,
    get_cloudinary_storage,
    get_local_storage,
    media_item_for,
    validate_image,
)

router = APIRouter(prefix="/api/media", tags=["media"], dependencies=[Depends(require_admin)])
logger = logging.getLogger(__name__)


def get_remote_media(settings: Settings = Depends(get_settings)) -> CloudinaryStorage:
    if not settings.cloudinary_cloud_name:
        raise HTTPException(status_code=503, detail="Cloudinary is not configured")
    return get_cloudinary_storage()


@router.get("")
async def list_local_media(
    local: LocalUploadStorage = Depends(get_local_storage),
    resolver: ImageResolver = Depends(get_image_resolver),
):
    items = [
        media_item_for(relative, path, resolver.resolve_for_display(relative))
        for relative, path in local.list_files()
    ]
    items.sort(key=lambda m: m.created_at.timestamp() if m.created_at else 0, reverse=True)
    logger.debug("Listing %d local media files", len(items))
    return {"media": [m.model_dump(mode="json") for m in items]}


@router.get("/cloudinary")
async def list_cloudinary_media(remote: CloudinaryStorage = Depends(get_remote_media)):
    try:
        items = remote.list_media()
    except RemoteStorageError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    return {"media": [m.model_dump(mode="json") for m in items]}


@router.post("/upload")
async def upload_media(
    request: Request,
    remote: CloudinaryStorage = Depends(get_remote_media),
    settings: Settings = Depends(get_settings),
):
    form = await request.form()
    files = form_files(form, ["file"])
    if not files:
        raise HTTPException(status_code=400, detail="No files were uploaded.")

    _, upload = files[0]
    content = await upload.read()
    try:
        validate_image(content, upload.content_type, max_bytes=settings.max_file_size)
        result = remote.upload(content, field_name="file", content_type=upload.content_type)
    except UploadError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except RemoteStorageError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc

    return {"success": True, "url": result.secure_url, "size": result.size}
