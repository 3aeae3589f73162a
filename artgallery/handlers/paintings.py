"""Painting catalogue endpoints."""
from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import ValidationError

from artgallery.handlers.forms import (
    form_files,
    form_text,
    referenced_elsewhere,
    store_and_resolve,
    validation_detail,
)
from artgallery.models import Painting
from artgallery.services.auth import require_admin
from artgallery.services.document_store import DocumentStore
from artgallery.services.firebase_db import get_db
from artgallery.services.images import ImageResolver, get_image_resolver
from artgallery.services.storage import UploadService, get_upload_service
from artgallery.utils.text import parse_bool, parse_str_list

router = APIRouter(prefix="/api/paintings", tags=["paintings"])
logger = logging.getLogger(__name__)

MAX_ARRAY_FILES = 5
IMAGE_FIELDS = ["images"] + [f"image_{i}" for i in range(10)]
TEXT_FIELDS = ("title", "artist", "category", "price", "description", "medium", "year", "size")
FLAG_FIELDS = ("is_available", "is_featured")


def present(painting: Painting, resolver: ImageResolver) -> dict[str, Any]:
    data = painting.model_dump(mode="json")
    data["images"] = resolver.display_all(painting.images)
    return data


def _collect_files(form):
    files = form_files(form, IMAGE_FIELDS)
    if sum(1 for name, _ in files if name == "images") > MAX_ARRAY_FILES:
        raise HTTPException(status_code=400, detail=f"Too many files. Maximum is {MAX_ARRAY_FILES} files")
    return files


def _field_updates(form) -> dict[str, Any]:
    updates: dict[str, Any] = {}
    for name in TEXT_FIELDS:
        value = form_text(form, name)
        if value is None or (value == "" and name in ("price", "year")):
            continue
        updates[name] = value
    for name in FLAG_FIELDS:
        flag = parse_bool(form_text(form, name))
        if flag is not None:
            updates[name] = flag
    tags = parse_str_list(form_text(form, "tags"))
    if tags is not None:
        updates["tags"] = tags
    return updates


# ---------------------------------------------------------------------------
# Public
# ---------------------------------------------------------------------------


@router.get("")
async def list_paintings(
    category: str | None = None,
    featured: bool | None = None,
    available: bool | None = None,
    db: DocumentStore = Depends(get_db),
    resolver: ImageResolver = Depends(get_image_resolver),
):
    paintings = db.list(Painting)
    if category:
        paintings = [p for p in paintings if p.category == category]
    if featured is not None:
        paintings = [p for p in paintings if p.is_featured == featured]
    if available is not None:
        paintings = [p for p in paintings if p.is_available == available]
    return [present(p, resolver) for p in paintings]


@router.get("/categories")
async def painting_categories(db: DocumentStore = Depends(get_db)):
    return sorted({p.category for p in db.list(Painting) if p.category})


@router.get("/{painting_id}")
async def get_painting(
    painting_id: str,
    db: DocumentStore = Depends(get_db),
    resolver: ImageResolver = Depends(get_image_resolver),
):
    painting = db.get(Painting, painting_id)
    if painting is None:
        raise HTTPException(status_code=404, detail="Painting not found")
    return present(painting, resolver)


# ---------------------------------------------------------------------------
# Admin
# ---------------------------------------------------------------------------


@router.post("", status_code=201, dependencies=[Depends(require_admin)])
async def create_painting(
    request: Request,
    db: DocumentStore = Depends(get_db),
    resolver: ImageResolver = Depends(get_image_resolver),
    uploader: UploadService = Depends(get_upload_service),
):
    form = await request.form()
    fields = _field_updates(form)
    if not fields.get("title", "").strip():
        raise HTTPException(status_code=400, detail="Title is required")

    uploaded = await store_and_resolve(uploader, resolver, _collect_files(form))
    images = list(uploaded)
    for url in parse_str_list(form_text(form, "image_urls")) or []:
        images.append(resolver.normalize_selected_url(url))
    logger.info("Processed %d images for new painting", len(images))

    if not images:
        raise HTTPException(status_code=400, detail="At least one image is required")

    try:
        painting = db.create(Painting, {**fields, "images": images})
    except ValidationError as exc:
        resolver.release_all(uploaded)
        raise HTTPException(status_code=400, detail=validation_detail(exc)) from exc
    return present(painting, resolver)


@router.put("/{painting_id}", dependencies=[Depends(require_admin)])
async def update_painting(
    painting_id: str,
    request: Request,
    db: DocumentStore = Depends(get_db),
    resolver: ImageResolver = Depends(get_image_resolver),
    uploader: UploadService = Depends(get_upload_service),
):
    painting = db.get(Painting, painting_id)
    if painting is None:
        raise HTTPException(status_code=404, detail="Painting not found")

    form = await request.form()
    files = _collect_files(form)
    fields = _field_updates(form)

    # Toggling availability / featured alone must leave the images untouched.
    if not files and set(form.keys()) <= set(FLAG_FIELDS) and fields:
        painting = db.save(painting.model_copy(update=fields))
        logger.info("Simple field update on painting %s: %s", painting_id, fields)
        return present(painting, resolver)

    existing = parse_str_list(form_text(form, "existing_images"))
    new_images = await store_and_resolve(uploader, resolver, files)
    removed: list[str] = []

    if existing is not None or new_images:
        kept = existing or []
        removed = [
            old
            for old in painting.images
            if old not in kept and resolver.resolve_for_display(old) not in kept
        ]
        fields["images"] = kept + new_images
        if not fields["images"]:
            raise HTTPException(status_code=400, detail="At least one image is required")
        logger.info(
            "Painting %s images: %d kept, %d new, %d removed",
            painting_id, len(kept), len(new_images), len(removed),
        )

    try:
        updated = db.save(painting.model_copy(update=fields))
    except ValidationError as exc:
        resolver.release_all(new_images)
        raise HTTPException(status_code=400, detail=validation_detail(exc)) from exc

    resolver.release_all(removed, is_referenced_elsewhere=referenced_elsewhere(db, painting_id))
    return present(updated, resolver)


@router.delete("/{painting_id}", dependencies=[Depends(require_admin)])
async def delete_painting(
    painting_id: str,
    db: DocumentStore = Depends(get_db),
    resolver: ImageResolver = Depends(get_image_resolver),
):
    painting = db.get(Painting, painting_id)
    if painting is None:
        raise HTTPException(status_code=404, detail="Painting not found")

    db.delete(Painting, painting_id)
    cleanup = resolver.release_all(
        painting.images, is_referenced_elsewhere=referenced_elsewhere(db, painting_id)
    )
    return {"message": "Painting deleted", "cleanup": [c.model_dump() for c in cleanup]}
