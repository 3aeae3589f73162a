"""Document persistence shared by every resource.

Documents live under ``/<collection>/<id>`` and are validated with the
pydantic models on the way in and out. Backends only implement the raw
key/value primitives; the typed CRUD helpers sit on :class:`DocumentStore`.
"""
from __future__ import annotations

import logging
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, TypeVar

from pydantic import BaseModel

from artgallery.models import BlogPost, Category, Order, Painting

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

COLLECTIONS: dict[type[BaseModel], str] = {
    Painting: "paintings",
    Category: "categories",
    BlogPost: "blogs",
    Order: "orders",
}


def _now() -> datetime:
    return datetime.now(timezone.utc)


class NotFoundError(LookupError):
    """Raised when a document to update does not exist."""


class DocumentStore(ABC):
    """Typed CRUD on top of a key/value document backend."""

    # -------------------------------------------------------------------
    # Backend primitives
    # -------------------------------------------------------------------

    @abstractmethod
    def _read_all(self, collection: str) -> dict[str, dict[str, Any]]:
        raise NotImplementedError

    @abstractmethod
    def _read(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        raise NotImplementedError

    @abstractmethod
    def _write(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        raise NotImplementedError

    @abstractmethod
    def _remove(self, collection: str, doc_id: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def _new_key(self, collection: str) -> str:
        raise NotImplementedError

    # -------------------------------------------------------------------
    # Typed helpers
    # -------------------------------------------------------------------

    def list(self, model: type[M]) -> list[M]:
        raw_items = self._read_all(COLLECTIONS[model]) or {}
        return [model.model_validate({**data, "id": key}) for key, data in raw_items.items()]

    def get(self, model: type[M], doc_id: str) -> M | None:
        data = self._read(COLLECTIONS[model], doc_id)
        if data is None:
            return None
        return model.model_validate({**data, "id": doc_id})

    def create(self, model: type[M], data: dict[str, Any]) -> M:
        collection = COLLECTIONS[model]
        doc_id = self._new_key(collection)
        now = _now()
        doc = model.model_validate({**data, "id": doc_id, "created_at": now, "updated_at": now})
        self._write(collection, doc_id, doc.model_dump(mode="json"))
        logger.debug("Created %s id=%s", collection, doc_id)
        return doc

    def save(self, doc: M) -> M:
        """Persist a full document (last write wins) and bump ``updated_at``."""

        collection = COLLECTIONS[type(doc)]
        doc_id = getattr(doc, "id")
        if self._read(collection, doc_id) is None:
            raise NotFoundError(f"{collection}/{doc_id} does not exist")
        updated = doc.model_copy(update={"updated_at": _now()})
        # Round-trip through validation so assignments made by callers are checked.
        updated = type(doc).model_validate(updated.model_dump(warnings=False))
        self._write(collection, doc_id, updated.model_dump(mode="json"))
        logger.debug("Saved %s id=%s", collection, doc_id)
        return updated

    def delete(self, model: type[BaseModel], doc_id: str) -> bool:
        collection = COLLECTIONS[model]
        if self._read(collection, doc_id) is None:
            return False
        self._remove(collection, doc_id)
        logger.debug("Deleted %s id=%s", collection, doc_id)
        return True

    def find_one(
        self, model: type[M], field: str, value: Any, *, exclude_id: str | None = None
    ) -> M | None:
        for doc in self.list(model):
            if getattr(doc, "id") != exclude_id and getattr(doc, field) == value:
                return doc
        return None

    def count_paintings_with_image(self, reference: str, *, exclude_id: str | None = None) -> int:
        """Number of paintings (other than ``exclude_id``) whose images include ``reference``."""

        raw_items = self._read_all(COLLECTIONS[Painting]) or {}
        return sum(
            1
            for key, data in raw_items.items()
            if key != exclude_id and reference in (data.get("images") or [])
        )

    def image_in_use(self, reference: str, *, exclude_id: str | None = None) -> bool:
        """Whether any painting, category or blog other than ``exclude_id`` uses ``reference``."""

        if self.count_paintings_with_image(reference, exclude_id=exclude_id):
            return True
        for model, field in ((Category, "image"), (BlogPost, "cover_image")):
            raw_items = self._read_all(COLLECTIONS[model]) or {}
            if any(key != exclude_id and data.get(field) == reference for key, data in raw_items.items()):
                return True
        return False


class InMemoryStore(DocumentStore):
    """Process-local store for development and tests."""

    def __init__(self) -> None:
        self._data: dict[str, dict[str, dict[str, Any]]] = {}

    def _read_all(self, collection: str) -> dict[str, dict[str, Any]]:
        return {k: dict(v) for k, v in self._data.get(collection, {}).items()}

    def _read(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        data = self._data.get(collection, {}).get(doc_id)
        return dict(data) if data is not None else None

    def _write(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        self._data.setdefault(collection, {})[doc_id] = dict(data)

    def _remove(self, collection: str, doc_id: str) -> None:
        self._data.get(collection, {}).pop(doc_id, None)

    def _new_key(self, collection: str) -> str:
        return uuid.uuid4().hex
