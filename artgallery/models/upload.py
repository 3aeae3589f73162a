from __future__ import annotations

from typing import Literal

from pydantic import BaseModel


class UploadResult(BaseModel):
    """What a storage backend hands back for one submitted file.

    The fields overlap on purpose: Cloudinary fills ``url``/``secure_url``
    (and mirrors the URL into ``path``), local disk storage fills ``path``
    and ``filename``. The image resolver decides which one wins.
    """

    url: str | None = None
    secure_url: str | None = None
    path: str | None = None
    filename: str | None = None
    field_name: str | None = None
    content_type: str | None = None
    size: int | None = None


CleanupStatus = Literal["deleted", "missing", "still_referenced", "remote", "empty", "failed"]


class CleanupResult(BaseModel):
    """Outcome of releasing an image reference after its owner changed."""

    status: CleanupStatus
    reference: str | None = None
    detail: str | None = None

    @property
    def deleted(self) -> bool:
        return self.status == "deleted"
