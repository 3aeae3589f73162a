"""Shared helpers for multipart handlers."""
from __future__ import annotations

from typing import Callable, Iterable

from fastapi import HTTPException
from pydantic import ValidationError
from starlette.datastructures import FormData, UploadFile

from artgallery.services.document_store import DocumentStore
from artgallery.services.images import ImageResolutionError, ImageResolver
from artgallery.services.storage import RemoteStorageError, UploadError, UploadService


def form_text(form: FormData, name: str) -> str | None:
    value = form.get(name)
    return value if isinstance(value, str) else None


def form_files(form: FormData, fields: Iterable[str]) -> list[tuple[str, UploadFile]]:
    """Non-empty files submitted under ``fields``, in field order."""

    files = []
    for name in fields:
        for value in form.getlist(name):
            # Empty <input type="file"> parts arrive with a blank filename.
            if isinstance(value, UploadFile) and value.filename:
                files.append((name, value))
    return files


def validation_detail(exc: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
    )


async def store_and_resolve(
    uploader: UploadService,
    resolver: ImageResolver,
    files: list[tuple[str, UploadFile]],
    *,
    folder: str | None = None,
) -> list[str]:
    """Store uploaded files and return the references to persist."""

    try:
        results = await uploader.store_many(files, folder=folder)
        return resolver.resolve_uploads(results)
    except (UploadError, ImageResolutionError) as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except RemoteStorageError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc


def referenced_elsewhere(db: DocumentStore, exclude_id: str) -> Callable[[str], bool]:
    return lambda reference: db.image_in_use(reference, exclude_id=exclude_id)

