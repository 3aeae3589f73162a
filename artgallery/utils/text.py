"""Small helpers for form values and blog text."""
from __future__ import annotations

import json
import math
import re
from typing import Any

_NON_WORD = re.compile(r"[^\w\s-]")
_SEPARATORS = re.compile(r"[\s_-]+")

WORDS_PER_MINUTE = 200


def slugify(title: str) -> str:
    slug = _NON_WORD.sub("", title.lower().strip())
    slug = _SEPARATORS.sub("-", slug)
    return slug.strip("-")


def read_time(content: str) -> int:
    """Whole minutes needed to read ``content``, at least one."""

    words = len(content.split())
    return max(1, math.ceil(words / WORDS_PER_MINUTE))


def parse_bool(value: Any, default: bool | None = None) -> bool | None:
    """Interpret multipart form booleans (``"true"``, ``"false"``, ``"1"``...)."""

    if value is None or value == "":
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in {"true", "1", "yes", "on"}


def parse_str_list(value: str | None) -> list[str] | None:
    """Accept a JSON array, a comma separated string or a single value."""

    if value is None:
        return None
    value = value.strip()
    if not value:
        return []
    if value.startswith("["):
        try:
            parsed = json.loads(value)
        except json.JSONDecodeError:
            parsed = None
        if isinstance(parsed, list):
            return [str(v).strip() for v in parsed if str(v).strip()]
    return [part.strip() for part in value.split(",") if part.strip()]
