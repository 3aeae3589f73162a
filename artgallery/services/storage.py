"""Upload storage for gallery images.

Two backends produce :class:`~artgallery.models.UploadResult` objects:

* local disk, files written under ``settings.uploads_dir`` and served by the
  API under ``/uploads``. Names follow ``{field}-{epoch_ms}-{random}.{ext}``
  and blog covers go into the ``blogs`` subfolder;
* Cloudinary, objects stored under ``settings.cloudinary_folder``.

Which one handles a request is decided by ``USE_CLOUDINARY``. Callers hand
the result to the image resolver to obtain the reference to persist.
"""
from __future__ import annotations

import io
import logging
import random
import time
from datetime import datetime, timezone
from functools import lru_cache
from pathlib import Path
from typing import Optional

import cloudinary
import cloudinary.uploader
from cloudinary.exceptions import Error as CloudinaryError
from fastapi import UploadFile
from PIL import Image

from artgallery.config import Settings, get_settings
from artgallery.models import MediaItem, UploadResult

logger = logging.getLogger(__name__)


class UploadError(ValueError):
    """Raised when a submitted file is rejected before it is stored."""


class RemoteStorageError(RuntimeError):
    """Raised when Cloudinary cannot be reached or rejects an upload."""


_VALID_IMAGE_PREFIX = "image/"

_MEDIA_TYPES = {
    "image": {".jpg", ".jpeg", ".png", ".gif", ".webp", ".svg"},
    "video": {".mp4", ".webm", ".ogg"},
    "audio": {".mp3", ".wav"},
    "document": {".pdf", ".doc", ".docx", ".xls", ".xlsx"},
}


def validate_image(content: bytes, content_type: str | None, *, max_bytes: int) -> None:
    if not content_type or not content_type.startswith(_VALID_IMAGE_PREFIX):
        raise UploadError("Only image files are allowed!")
    if len(content) > max_bytes:
        raise UploadError(f"File too large. Maximum size is {max_bytes // (1024 * 1024)}MB")
    if content_type == "image/svg+xml":
        return
    try:
        with Image.open(io.BytesIO(content)) as img:
            img.verify()
    except Exception as exc:
        raise UploadError("Uploaded file is not a valid image") from exc


class LocalUploadStorage:
    """Stores uploads on local disk under a single base directory."""

    def __init__(self, base_dir: Path | str) -> None:
        self.base_dir = Path(base_dir)
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def save(
        self,
        content: bytes,
        *,
        original_filename: str | None,
        field_name: str,
        content_type: str | None = None,
        folder: str | None = None,
    ) -> UploadResult:
        ext = _extension_for(original_filename, content_type)
        name = f"{field_name}-{int(time.time() * 1000)}-{random.randint(0, 10**9)}{ext}"
        relative = f"{folder}/{name}" if folder else name

        target = self.base_dir / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content)
        logger.debug("Saved upload %s (%d bytes)", target, len(content))

        return UploadResult(
            path=str(target),
            filename=relative,
            field_name=field_name,
            content_type=content_type,
            size=len(content),
        )

    def list_files(self) -> list[tuple[str, Path]]:
        """Return ``(relative_posix_path, absolute_path)`` for every stored file."""

        if not self.base_dir.exists():
            return []
        return [
            (p.relative_to(self.base_dir).as_posix(), p)
            for p in self.base_dir.rglob("*")
            if p.is_file()
        ]


class CloudinaryStorage:
    """Thin wrapper around the Cloudinary upload and search APIs."""

    _MAX_RESULTS = 100

    def __init__(self, settings: Settings) -> None:
        self._folder = settings.cloudinary_folder
        cloudinary.config(
            cloud_name=settings.cloudinary_cloud_name,
            api_key=settings.cloudinary_api_key,
            api_secret=settings.cloudinary_api_secret,
            secure=True,
        )

    def upload(
        self,
        content: bytes,
        *,
        field_name: str,
        content_type: str | None = None,
        folder: str | None = None,
    ) -> UploadResult:
        target_folder = f"{self._folder}/{folder}" if folder else self._folder
        try:
            result = cloudinary.uploader.upload(
                io.BytesIO(content), folder=target_folder, resource_type="auto"
            )
        except CloudinaryError as exc:
            logger.error("Cloudinary upload failed: %s", exc)
            raise RemoteStorageError(f"Cloudinary upload failed: {exc}") from exc

        secure_url = result.get("secure_url")
        logger.debug("Uploaded %s to Cloudinary as %s", field_name, result.get("public_id"))
        return UploadResult(
            url=secure_url,
            secure_url=secure_url,
            path=secure_url,
            field_name=field_name,
            content_type=content_type,
            size=result.get("bytes", len(content)),
        )

    def list_media(self) -> list[MediaItem]:
        try:
            result = (
                cloudinary.Search()
                .expression(f"folder:{self._folder}/*")
                .sort_by("created_at", "desc")
                .max_results(self._MAX_RESULTS)
                .execute()
            )
        except CloudinaryError as exc:
            logger.error("Error fetching Cloudinary media: %s", exc)
            raise RemoteStorageError(f"Error fetching Cloudinary media: {exc}") from exc

        resources = result.get("resources", [])
        logger.info("Found %d resources in Cloudinary", len(resources))
        return [
            MediaItem(
                id=res["public_id"],
                filename=res["public_id"].split("/")[-1],
                url=res["secure_url"],
                type="image" if res.get("resource_type") == "image" else "document",
                size=res.get("bytes", 0),
                source="cloudinary",
                created_at=res.get("created_at"),
                updated_at=res.get("uploaded_at") or res.get("created_at"),
                width=res.get("width"),
                height=res.get("height"),
                format=res.get("format"),
            )
            for res in resources
        ]


class UploadService:
    """Reads multipart files and routes them to the configured backend."""

    def __init__(
        self,
        *,
        local: LocalUploadStorage,
        remote: Optional[CloudinaryStorage] = None,
        max_file_size: int = 10 * 1024 * 1024,
    ) -> None:
        self.local = local
        self.remote = remote
        self.max_file_size = max_file_size

    async def store(
        self, upload: UploadFile, *, field_name: str, folder: str | None = None
    ) -> UploadResult:
        content = await upload.read()
        validate_image(content, upload.content_type, max_bytes=self.max_file_size)

        if self.remote is not None:
            return self.remote.upload(
                content, field_name=field_name, content_type=upload.content_type, folder=folder
            )
        return self.local.save(
            content,
            original_filename=upload.filename,
            field_name=field_name,
            content_type=upload.content_type,
            folder=folder,
        )

    async def store_many(
        self, uploads: list[tuple[str, UploadFile]], *, folder: str | None = None
    ) -> list[UploadResult]:
        results = []
        for field_name, upload in uploads:
            results.append(await self.store(upload, field_name=field_name, folder=folder))
        logger.info("Processed %d files", len(results))
        return results


def media_item_for(relative: str, path: Path, url: str) -> MediaItem:
    stats = path.stat()
    width = height = None
    media_type = _media_type(path.suffix)
    if media_type == "image":
        try:
            with Image.open(path) as img:
                width, height = img.size
        except Exception:  # pragma: no cover
            logger.debug("Could not read dimensions of %s", path)
    return MediaItem(
        id=relative,
        filename=path.name,
        url=url,
        type=media_type,
        size=stats.st_size,
        source="local",
        created_at=datetime.fromtimestamp(stats.st_ctime, tz=timezone.utc),
        updated_at=datetime.fromtimestamp(stats.st_mtime, tz=timezone.utc),
        width=width,
        height=height,
        format=path.suffix.lstrip(".").lower() or None,
    )


# ------------------------------------------------------------------
# Helper functions
# ------------------------------------------------------------------

def _content_type_to_extension(content_type: str) -> str:
    mapping = {
        "image/jpeg": "jpg",
        "image/jpg": "jpg",
        "image/png": "png",
        "image/webp": "webp",
        "image/gif": "gif",
    }
    return mapping.get(content_type.lower(), "jpg")


def _extension_for(original_filename: str | None, content_type: str | None) -> str:
    if original_filename and "." in original_filename:
        return "." + original_filename.rsplit(".", 1)[-1].lower()
    return "." + _content_type_to_extension(content_type or "")


def _media_type(suffix: str) -> str:
    suffix = suffix.lower()
    for media_type, suffixes in _MEDIA_TYPES.items():
        if suffix in suffixes:
            return media_type
    return "unknown"


@lru_cache()
def get_local_storage() -> LocalUploadStorage:
    return LocalUploadStorage(get_settings().uploads_dir)


@lru_cache()
def get_cloudinary_storage() -> CloudinaryStorage:
    return CloudinaryStorage(get_settings())


def get_upload_service() -> UploadService:
    settings = get_settings()
    remote = get_cloudinary_storage() if settings.use_cloudinary else None
    return UploadService(local=get_local_storage(), remote=remote, max_file_size=settings.max_file_size)
