"""Category endpoints; each category may carry a single cover image."""
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
from artgallery.models import Category
from artgallery.services.auth import require_admin
from artgallery.services.document_store import DocumentStore
from artgallery.services.firebase_db import get_db
from artgallery.services.images import ImageResolver, get_image_resolver
from artgallery.services.storage import UploadService, get_upload_service
from artgallery.utils.text import parse_bool

router = APIRouter(prefix="/api/categories", tags=["categories"])
logger = logging.getLogger(__name__)


def present(category: Category, resolver: ImageResolver) -> dict[str, Any]:
    data = category.model_dump(mode="json")
    data["image"] = resolver.resolve_for_display(category.image)
    return data


def _selected_url(form, resolver: ImageResolver) -> str | None:
    url = form_text(form, "image_url") or form_text(form, "gallery_image")
    return resolver.normalize_selected_url(url.strip()) if url and url.strip() else None


@router.get("")
async def list_categories(
    db: DocumentStore = Depends(get_db),
    resolver: ImageResolver = Depends(get_image_resolver),
):
    categories = sorted(db.list(Category), key=lambda c: c.name.lower())
    return {"categories": [present(c, resolver) for c in categories]}


@router.get("/{category_id}")
async def get_category(
    category_id: str,
    db: DocumentStore = Depends(get_db),
    resolver: ImageResolver = Depends(get_image_resolver),
):
    category = db.get(Category, category_id)
    if category is None:
        raise HTTPException(status_code=404, detail="Category not found")
    return present(category, resolver)


@router.post("", status_code=201, dependencies=[Depends(require_admin)])
async def create_category(
    request: Request,
    db: DocumentStore = Depends(get_db),
    resolver: ImageResolver = Depends(get_image_resolver),
    uploader: UploadService = Depends(get_upload_service),
):
    form = await request.form()
    name = (form_text(form, "name") or "").strip()
    if not name:
        raise HTTPException(status_code=400, detail="Category name is required")
    if db.find_one(Category, "name", name) is not None:
        raise HTTPException(status_code=400, detail="Category already exists")

    uploaded = await store_and_resolve(uploader, resolver, form_files(form, ["image"]))
    image = uploaded[0] if uploaded else _selected_url(form, resolver)

    try:
        category = db.create(
            Category,
            {
                "name": name,
                "description": form_text(form, "description"),
                "is_active": parse_bool(form_text(form, "is_active"), default=True),
                "image": image,
            },
        )
    except ValidationError as exc:
        resolver.release_all(uploaded)
        raise HTTPException(status_code=400, detail=validation_detail(exc)) from exc

    logger.info("Created category %s (%s)", category.name, category.id)
    return present(category, resolver)


@router.put("/{category_id}", dependencies=[Depends(require_admin)])
async def update_category(
    category_id: str,
    request: Request,
    db: DocumentStore = Depends(get_db),
    resolver: ImageResolver = Depends(get_image_resolver),
    uploader: UploadService = Depends(get_upload_service),
):
    category = db.get(Category, category_id)
    if category is None:
        raise HTTPException(status_code=404, detail="Category not found")

    form = await request.form()
    name = form_text(form, "name")
    if name and db.find_one(Category, "name", name.strip(), exclude_id=category_id) is not None:
        raise HTTPException(status_code=400, detail="Another category with this name already exists")

    updates: dict[str, Any] = {}
    replaced: str | None = None

    # New file > selected URL > explicit removal; keep_existing_image or omission is a no-op.
    uploaded = await store_and_resolve(uploader, resolver, form_files(form, ["image"]))
    selected = _selected_url(form, resolver)
    if uploaded:
        updates["image"] = uploaded[0]
    elif selected:
        updates["image"] = selected
    elif parse_bool(form_text(form, "remove_image"), default=False) and category.image:
        updates["image"] = None
    if "image" in updates and category.image and updates["image"] != category.image:
        replaced = category.image

    if name:
        updates["name"] = name.strip()
    description = form_text(form, "description")
    if description is not None:
        updates["description"] = description
    is_active = parse_bool(form_text(form, "is_active"))
    if is_active is not None:
        updates["is_active"] = is_active

    try:
        updated = db.save(category.model_copy(update=updates))
    except ValidationError as exc:
        resolver.release_all(uploaded)
        raise HTTPException(status_code=400, detail=validation_detail(exc)) from exc

    if replaced:
        logger.info("Category %s image replaced", category_id)
        resolver.release(replaced, is_referenced_elsewhere=referenced_elsewhere(db, category_id))
    return present(updated, resolver)


@router.delete("/{category_id}", dependencies=[Depends(require_admin)])
async def delete_category(
    category_id: str,
    db: DocumentStore = Depends(get_db),
    resolver: ImageResolver = Depends(get_image_resolver),
):
    category = db.get(Category, category_id)
    if category is None:
        raise HTTPException(status_code=404, detail="Category not found")

    db.delete(Category, category_id)
    cleanup = resolver.release(category.image, is_referenced_elsewhere=referenced_elsewhere(db, category_id))
    return {"message": "Category deleted successfully", "cleanup": cleanup.model_dump()}
