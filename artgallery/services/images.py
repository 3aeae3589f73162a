"""Image reference resolution for paintings, categories and blog covers.

An image reference is the string persisted on a document. It is produced at
upload time either by Cloudinary (an absolute ``https://res.cloudinary.com``
URL) or by local disk storage (a bare filename that still needs a host
prefix). This module turns upload results into storable references, turns
stored references into URLs a browser can fetch, and releases local files
once nothing points at them any more.

Remote vs. local is decided by a plain substring check for
``REMOTE_STORAGE_MARKER``. A local file whose name happens to contain the
marker is therefore treated as remote and never deleted from disk.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Iterable, Optional

from artgallery.config import Settings, get_settings
from artgallery.models import CleanupResult, UploadResult

logger = logging.getLogger(__name__)

REMOTE_STORAGE_MARKER = "cloudinary"
UPLOADS_SEGMENT = "/uploads/"
BLOG_SUBFOLDER = "blogs"


class ImageResolutionError(ValueError):
    """Raised when an upload result carries nothing usable as an image reference."""


def is_remote(reference: str) -> bool:
    return REMOTE_STORAGE_MARKER in reference


def _is_absolute(reference: str) -> bool:
    return reference.startswith(("http://", "https://"))


class ImageResolver:
    """Resolves, displays and releases image references for one environment."""

    def __init__(self, *, host_prefix: str, uploads_dir: Path | str) -> None:
        self.host_prefix = host_prefix.rstrip("/")
        self.uploads_dir = Path(uploads_dir)

    @classmethod
    def from_settings(cls, settings: Settings) -> "ImageResolver":
        return cls(host_prefix=settings.host_prefix, uploads_dir=settings.uploads_dir)

    # ------------------------------------------------------------------
    # Upload results -> stored references
    # ------------------------------------------------------------------

    def resolve_upload(self, result: UploadResult) -> str:
        """Pick the reference to persist for a single uploaded file.

        Priority: ``url``, then a ``path`` pointing at remote storage, then
        ``secure_url``, then ``<host>/uploads/<filename>``.

        Raises
        ------
        ImageResolutionError
            If none of the fields yields a usable reference.
        """

        if result.url:
            logger.debug("Using storage-provided URL: %s", result.url)
            return result.url
        if result.path and is_remote(result.path):
            logger.debug("Using remote path: %s", result.path)
            return result.path
        if result.secure_url:
            logger.debug("Using secure URL: %s", result.secure_url)
            return result.secure_url
        if result.filename:
            return f"{self.host_prefix}{UPLOADS_SEGMENT}{result.filename.lstrip('/')}"
        raise ImageResolutionError("No usable image reference could be determined for the upload")

    def resolve_uploads(self, results: Iterable[UploadResult]) -> list[str]:
        return [self.resolve_upload(r) for r in results]

    def normalize_selected_url(self, url: str) -> str:
        """Re-host a URL picked from the media gallery on the current origin."""

        if is_remote(url) or UPLOADS_SEGMENT not in url:
            return url
        rest = url.split(UPLOADS_SEGMENT, 1)[1]
        return f"{self.host_prefix}{UPLOADS_SEGMENT}{rest}"

    # ------------------------------------------------------------------
    # Stored references -> display URLs
    # ------------------------------------------------------------------

    def resolve_for_display(self, reference: Optional[str], subfolder: str = "") -> Optional[str]:
        """Return a URL usable directly as an ``<img src>``.

        Remote and already-absolute references come back unchanged. Relative
        fragments get the host prefix and, unless they already contain it,
        the ``/uploads/<subfolder>/`` segment.
        """

        if not reference:
            return None
        if is_remote(reference) or _is_absolute(reference):
            return reference
        fragment = reference.lstrip("/")
        if UPLOADS_SEGMENT in "/" + fragment:
            return f"{self.host_prefix}/{fragment}"
        folder = UPLOADS_SEGMENT + (f"{subfolder.strip('/')}/" if subfolder else "")
        return f"{self.host_prefix}{folder}{fragment}"

    def display_all(self, references: Iterable[str], subfolder: str = "") -> list[str]:
        resolved = (self.resolve_for_display(r, subfolder) for r in references)
        return [r for r in resolved if r]

    # ------------------------------------------------------------------
    # Cleanup
    # ------------------------------------------------------------------

    def local_path(self, reference: str, subfolder: str = "") -> Optional[str]:
        """Path of a local reference relative to the uploads directory."""

        if not reference or is_remote(reference):
            return None
        if UPLOADS_SEGMENT in reference:
            return reference.split(UPLOADS_SEGMENT, 1)[1] or None
        if _is_absolute(reference):
            return None
        fragment = reference.lstrip("/")
        if fragment.startswith("uploads/"):
            return fragment[len("uploads/"):] or None
        return f"{subfolder.strip('/')}/{fragment}" if subfolder else fragment

    def _file_path(self, relative: str) -> Path:
        root = self.uploads_dir.resolve()
        candidate = (root / relative).resolve()
        if root not in candidate.parents:
            raise ValueError(f"Refusing to touch {candidate}: outside uploads directory")
        return candidate

    def release(
        self,
        reference: Optional[str],
        *,
        subfolder: str = "",
        is_referenced_elsewhere: Callable[[str], bool] | None = None,
    ) -> CleanupResult:
        """Delete the local file behind ``reference`` if nothing else uses it.

        Never raises: failures are logged and reported as ``failed`` so the
        owning CRUD operation is unaffected.
        """

        if not reference:
            return CleanupResult(status="empty")
        if is_remote(reference):
            logger.debug("Skipping cleanup of remote image %s", reference)
            return CleanupResult(status="remote", reference=reference)

        try:
            if is_referenced_elsewhere is not None and is_referenced_elsewhere(reference):
                logger.info("Skipped deleting %s - still referenced elsewhere", reference)
                return CleanupResult(status="still_referenced", reference=reference)

            relative = self.local_path(reference, subfolder)
            if relative is None:
                return CleanupResult(status="missing", reference=reference, detail="not a local upload")

            file_path = self._file_path(relative)
            if not file_path.is_file():
                logger.debug("Local image %s already gone", file_path)
                return CleanupResult(status="missing", reference=reference)

            file_path.unlink()
            logger.info("Deleted image: %s", file_path)
            return CleanupResult(status="deleted", reference=reference)
        except Exception as exc:
            logger.error("Error deleting image %s: %s", reference, exc)
            return CleanupResult(status="failed", reference=reference, detail=str(exc))

    def release_all(
        self,
        references: Iterable[str],
        *,
        subfolder: str = "",
        is_referenced_elsewhere: Callable[[str], bool] | None = None,
    ) -> list[CleanupResult]:
        return [
            self.release(r, subfolder=subfolder, is_referenced_elsewhere=is_referenced_elsewhere)
            for r in references
        ]


def get_image_resolver() -> ImageResolver:
    return ImageResolver.from_settings(get_settings())
