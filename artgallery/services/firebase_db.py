"""Firebase Realtime Database backend for the gallery documents.

Documents are stored under the following path structure:

/paintings/{painting_id}
/categories/{category_id}
/blogs/{blog_id}
/orders/{order_id}

The Admin SDK is initialised lazily on first use so importing this module
never needs credentials.
"""
from __future__ import annotations

import json
import logging
from functools import lru_cache
from typing import Any

import firebase_admin
from firebase_admin import credentials, db

from artgallery.config import Settings, get_settings
from artgallery.services.document_store import DocumentStore, InMemoryStore

logger = logging.getLogger(__name__)


def _initialise_app(settings: Settings) -> None:
    """Initialise the Firebase Admin SDK exactly once."""

    if firebase_admin._apps:  # type: ignore[attr-defined]
        return
    try:
        if settings.firebase_credentials_json:
            # Accept path or JSON string
            cred_obj: credentials.Base = (
                credentials.Certificate(settings.firebase_credentials_json)
                if settings.firebase_credentials_json.endswith(".json")
                else credentials.Certificate(json.loads(settings.firebase_credentials_json))
            )
        else:
            # Attempt default credentials (useful on Cloud Run with workload identity)
            cred_obj = credentials.ApplicationDefault()

        firebase_admin.initialize_app(cred_obj, {"databaseURL": settings.firebase_database_url})
        logger.info("Firebase Admin SDK initialised.")
    except Exception as exc:  # pragma: no cover
        logger.exception("Failed to initialise Firebase Admin SDK: %s", exc)
        raise


class FirebaseDB(DocumentStore):  # pylint: disable=too-few-public-methods
    """Wrapper around Firebase Realtime Database operations."""

    def __init__(self, settings: Settings) -> None:
        _initialise_app(settings)
        self._root = db.reference("/")

    def _read_all(self, collection: str) -> dict[str, dict[str, Any]]:
        # An empty collection comes back as None.
        return self._root.child(collection).get() or {}

    def _read(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        return self._root.child(collection).child(doc_id).get()

    def _write(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        self._root.child(collection).child(doc_id).set(data)

    def _remove(self, collection: str, doc_id: str) -> None:
        self._root.child(collection).child(doc_id).delete()

    def _new_key(self, collection: str) -> str:
        # push() without a value only generates the key locally
        return self._root.child(collection).push().key  # type: ignore[return-value]


@lru_cache()
def get_db() -> DocumentStore:
    settings = get_settings()
    if settings.document_store == "memory":
        logger.warning("Using the in-memory document store; data is lost on restart.")
        return InMemoryStore()
    return FirebaseDB(settings)
