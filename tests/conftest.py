import io
import os
import tempfile

# Settings are read when artgallery.main is imported; keep them away from real services.
os.environ.setdefault("DOCUMENT_STORE", "memory")
os.environ.setdefault("UPLOADS_DIR", tempfile.mkdtemp(prefix="artgallery-uploads-"))

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from artgallery.config import Settings, get_settings
from artgallery.main import app
from artgallery.services.auth import create_token
from artgallery.services.document_store import InMemoryStore
from artgallery.services.email import get_email_service
from artgallery.services.firebase_db import get_db
from artgallery.services.images import ImageResolver, get_image_resolver
from artgallery.services.storage import (
    LocalUploadStorage,
    UploadService,
    get_local_storage,
    get_upload_service,
)

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "s3cret"


class FakeMailer:
    """Records notifications instead of talking to an SMTP server."""

    def __init__(self):
        self.sent = []
        self.fail = False

    def _record(self, kind, *args):
        if self.fail:
            return False
        self.sent.append((kind, args))
        return True

    def send_order_confirmation(self, order):
        return self._record("order_confirmation", order)

    def send_order_notification(self, order):
        return self._record("order_notification", order)

    def send_order_status_update(self, order, previous_status):
        return self._record("order_status", order, previous_status)

    def send_contact_message(self, name, email, subject, message):
        return self._record("contact", name, email, subject, message)

    def send_contact_acknowledgement(self, name, email, subject):
        return self._record("contact_ack", name, email, subject)

    def kinds(self):
        return [kind for kind, _ in self.sent]


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        ENVIRONMENT="development",
        UPLOADS_DIR=tmp_path / "uploads",
        DOCUMENT_STORE="memory",
        USE_CLOUDINARY=False,
        ADMIN_EMAIL=ADMIN_EMAIL,
        ADMIN_PASSWORD=ADMIN_PASSWORD,
        JWT_SECRET="test-secret-key",
    )


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def resolver(settings):
    return ImageResolver.from_settings(settings)


@pytest.fixture
def local_storage(settings):
    return LocalUploadStorage(settings.uploads_dir)


@pytest.fixture
def uploader(local_storage, settings):
    return UploadService(local=local_storage, max_file_size=settings.max_file_size)


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def client(settings, store, resolver, local_storage, uploader, mailer):
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_db] = lambda: store
    app.dependency_overrides[get_image_resolver] = lambda: resolver
    app.dependency_overrides[get_local_storage] = lambda: local_storage
    app.dependency_overrides[get_upload_service] = lambda: uploader
    app.dependency_overrides[get_email_service] = lambda: mailer
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers(settings):
    token = create_token(settings.admin_email, settings)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def png_bytes():
    buf = io.BytesIO()
    Image.new("RGB", (4, 4), color=(200, 30, 30)).save(buf, format="PNG")
    return buf.getvalue()
