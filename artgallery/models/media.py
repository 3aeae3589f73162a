from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel

MediaType = Literal["image", "video", "audio", "document", "unknown"]


class MediaItem(BaseModel):
    id: str
    filename: str
    url: str
    type: MediaType = "unknown"
    size: int = 0
    source: Literal["local", "cloudinary"] = "local"
    created_at: datetime | None = None
    updated_at: datetime | None = None
    width: int | None = None
    height: int | None = None
    format: str | None = None
