from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class Painting(BaseModel):
    id: str
    title: str = Field(..., min_length=1, max_length=100)
    artist: str = "Kashish Art India"
    category: str = ""
    price: float = Field(0, ge=0)
    description: str = Field("", max_length=1000)
    medium: str | None = None
    year: int | None = None
    size: str | None = None
    tags: list[str] = []
    is_available: bool = True
    is_featured: bool = False
    views: int = 0
    images: list[str] = []
    created_at: datetime | None = None
    updated_at: datetime | None = None
