from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class BlogPost(BaseModel):
    """A blog article; ``slug`` and ``read_time`` are derived from title and content."""

    id: str
    title: str = Field(..., min_length=1, max_length=200)
    slug: str
    content: str
    summary: str = Field(..., max_length=500)
    cover_image: str | None = None
    tags: list[str] = []
    is_published: bool = False
    author: str | None = None
    read_time: int = 1
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def url(self) -> str:
        return f"/blog/{self.slug}"
