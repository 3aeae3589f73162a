"""Blog endpoints.

Unpublished posts are only visible with an admin token. Cover images are
stored in the ``blogs`` subfolder of the uploads directory, so display and
cleanup always pass ``BLOG_SUBFOLDER`` to the resolver.
"""
from __future__ import annotations

import logging
import math
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from pydantic import ValidationError

from artgallery.handlers.forms import (
    form_files,
    form_text,
    referenced_elsewhere,
    store_and_resolve,
    validation_detail,
)
from artgallery.models import BlogPost
from artgallery.services.auth import optional_admin, require_admin
from artgallery.services.document_store import DocumentStore
from artgallery.services.firebase_db import get_db
from artgallery.services.images import BLOG_SUBFOLDER, ImageResolver, get_image_resolver
from artgallery.services.storage import UploadService, get_upload_service
from artgallery.utils.text import parse_bool, parse_str_list, read_time, slugify

router = APIRouter(prefix="/api/blogs", tags=["blogs"])
logger = logging.getLogger(__name__)


def present(post: BlogPost, resolver: ImageResolver) -> dict[str, Any]:
    data = post.model_dump(mode="json")
    data["cover_image"] = resolver.resolve_for_display(post.cover_image, BLOG_SUBFOLDER)
    data["url"] = post.url
    return data


def _unique_slug(db: DocumentStore, title: str, exclude_id: str | None = None) -> str:
    base = slugify(title) or "post"
    taken = {p.slug for p in db.list(BlogPost) if p.id != exclude_id}
    slug, n = base, 1
    while slug in taken:
        n += 1
        slug = f"{base}-{n}"
    return slug


def _selected_cover(form, resolver: ImageResolver) -> str | None:
    url = form_text(form, "cloudinary_cover_image") or form_text(form, "image_url")
    return resolver.normalize_selected_url(url.strip()) if url and url.strip() else None


def _visible(post: BlogPost, admin: dict | None) -> BlogPost:
    if not post.is_published and admin is None:
        raise HTTPException(status_code=403, detail="This blog post is not published")
    return post


# ---------------------------------------------------------------------------
# Public
# ---------------------------------------------------------------------------


@router.get("")
async def list_blogs(
    tag: str | None = None,
    search: str | None = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    admin: dict | None = Depends(optional_admin),
    db: DocumentStore = Depends(get_db),
    resolver: ImageResolver = Depends(get_image_resolver),
):
    posts = db.list(BlogPost)
    if admin is None:
        posts = [p for p in posts if p.is_published]
    if tag:
        posts = [p for p in posts if tag in p.tags]
    if search:
        needle = search.lower()
        posts = [
            p for p in posts
            if needle in p.title.lower() or needle in p.summary.lower() or needle in p.content.lower()
        ]
    posts.sort(key=lambda p: p.created_at.timestamp() if p.created_at else 0, reverse=True)

    total = len(posts)
    start = (page - 1) * limit
    page_items = posts[start:start + limit]
    return {
        "success": True,
        "count": len(page_items),
        "total": total,
        "pagination": {
            "total_pages": math.ceil(total / limit),
            "current_page": page,
            "has_more": start + limit < total,
        },
        "data": [present(p, resolver) for p in page_items],
    }


@router.get("/tags")
async def blog_tags(db: DocumentStore = Depends(get_db)):
    tags = {t for p in db.list(BlogPost) if p.is_published for t in p.tags}
    return {"success": True, "data": sorted(tags)}


@router.get("/slug/{slug}")
async def get_blog_by_slug(
    slug: str,
    admin: dict | None = Depends(optional_admin),
    db: DocumentStore = Depends(get_db),
    resolver: ImageResolver = Depends(get_image_resolver),
):
    post = db.find_one(BlogPost, "slug", slug)
    if post is None:
        raise HTTPException(status_code=404, detail="Blog post not found")
    return {"success": True, "data": present(_visible(post, admin), resolver)}


@router.get("/{blog_id}")
async def get_blog(
    blog_id: str,
    admin: dict | None = Depends(optional_admin),
    db: DocumentStore = Depends(get_db),
    resolver: ImageResolver = Depends(get_image_resolver),
):
    post = db.get(BlogPost, blog_id)
    if post is None:
        raise HTTPException(status_code=404, detail="Blog post not found")
    return {"success": True, "data": present(_visible(post, admin), resolver)}


# ---------------------------------------------------------------------------
# Admin
# ---------------------------------------------------------------------------


@router.post("", status_code=201)
async def create_blog(
    request: Request,
    admin: dict = Depends(require_admin),
    db: DocumentStore = Depends(get_db),
    resolver: ImageResolver = Depends(get_image_resolver),
    uploader: UploadService = Depends(get_upload_service),
):
    form = await request.form()
    title = (form_text(form, "title") or "").strip()
    content = form_text(form, "content") or ""
    summary = form_text(form, "summary") or ""
    if not title or not content.strip() or not summary.strip():
        raise HTTPException(status_code=400, detail="Title, content and summary are required")

    uploaded = await store_and_resolve(
        uploader, resolver, form_files(form, ["cover_image"]), folder=BLOG_SUBFOLDER
    )
    cover = uploaded[0] if uploaded else _selected_cover(form, resolver)

    try:
        post = db.create(
            BlogPost,
            {
                "title": title,
                "slug": _unique_slug(db, title),
                "content": content,
                "summary": summary,
                "cover_image": cover,
                "tags": parse_str_list(form_text(form, "tags")) or [],
                "is_published": parse_bool(form_text(form, "is_published"), default=False),
                "author": admin.get("sub"),
                "read_time": read_time(content),
            },
        )
    except ValidationError as exc:
        resolver.release_all(uploaded, subfolder=BLOG_SUBFOLDER)
        raise HTTPException(status_code=400, detail=validation_detail(exc)) from exc

    logger.info("Created blog post %s (%s)", post.id, post.slug)
    return {"success": True, "data": present(post, resolver)}


@router.put("/{blog_id}", dependencies=[Depends(require_admin)])
async def update_blog(
    blog_id: str,
    request: Request,
    db: DocumentStore = Depends(get_db),
    resolver: ImageResolver = Depends(get_image_resolver),
    uploader: UploadService = Depends(get_upload_service),
):
    post = db.get(BlogPost, blog_id)
    if post is None:
        raise HTTPException(status_code=404, detail="Blog post not found")

    form = await request.form()
    updates: dict[str, Any] = {}

    title = form_text(form, "title")
    if title and title.strip() and title.strip() != post.title:
        updates["title"] = title.strip()
        updates["slug"] = _unique_slug(db, title, exclude_id=blog_id)
    content = form_text(form, "content")
    if content is not None and content != post.content:
        updates["content"] = content
        updates["read_time"] = read_time(content)
    summary = form_text(form, "summary")
    if summary is not None:
        updates["summary"] = summary
    tags = parse_str_list(form_text(form, "tags"))
    if tags is not None:
        updates["tags"] = tags
    published = parse_bool(form_text(form, "is_published"))
    if published is not None:
        updates["is_published"] = published

    uploaded = await store_and_resolve(
        uploader, resolver, form_files(form, ["cover_image"]), folder=BLOG_SUBFOLDER
    )
    selected = _selected_cover(form, resolver)
    if uploaded:
        updates["cover_image"] = uploaded[0]
    elif selected:
        updates["cover_image"] = selected
    elif parse_bool(form_text(form, "remove_cover_image"), default=False) and post.cover_image:
        updates["cover_image"] = None
    replaced = None
    if "cover_image" in updates and post.cover_image and updates["cover_image"] != post.cover_image:
        replaced = post.cover_image

    try:
        updated = db.save(post.model_copy(update=updates))
    except ValidationError as exc:
        resolver.release_all(uploaded, subfolder=BLOG_SUBFOLDER)
        raise HTTPException(status_code=400, detail=validation_detail(exc)) from exc

    if replaced:
        resolver.release(
            replaced,
            subfolder=BLOG_SUBFOLDER,
            is_referenced_elsewhere=referenced_elsewhere(db, blog_id),
        )
    return {"success": True, "data": present(updated, resolver)}


@router.patch("/{blog_id}/publish", dependencies=[Depends(require_admin)])
async def toggle_publish(
    blog_id: str,
    db: DocumentStore = Depends(get_db),
    resolver: ImageResolver = Depends(get_image_resolver),
):
    post = db.get(BlogPost, blog_id)
    if post is None:
        raise HTTPException(status_code=404, detail="Blog post not found")
    updated = db.save(post.model_copy(update={"is_published": not post.is_published}))
    logger.info("Blog post %s published=%s", blog_id, updated.is_published)
    return {"success": True, "data": present(updated, resolver)}


@router.delete("/{blog_id}", dependencies=[Depends(require_admin)])
async def delete_blog(
    blog_id: str,
    db: DocumentStore = Depends(get_db),
    resolver: ImageResolver = Depends(get_image_resolver),
):
    post = db.get(BlogPost, blog_id)
    if post is None:
        raise HTTPException(status_code=404, detail="Blog post not found")

    db.delete(BlogPost, blog_id)
    cleanup = resolver.release(
        post.cover_image,
        subfolder=BLOG_SUBFOLDER,
        is_referenced_elsewhere=referenced_elsewhere(db, blog_id),
    )
    return {"success": True, "message": "Blog post deleted", "cleanup": cleanup.model_dump()}
