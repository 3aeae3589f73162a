from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class Category(BaseModel):
    id: str
    name: str = Field(..., min_length=1)
    description: str | None = None
    is_active: bool = True
    image: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
