from artgallery.handlers.media import get_remote_media
from artgallery.models import MediaItem, UploadResult

CLOUD_URL = "https://res.cloudinary.com/demo/image/upload/v1/kashish_art_india/a.png"


class FakeCloudinary:
    def __init__(self):
        self.uploads = []

    def upload(self, content, *, field_name, content_type=None, folder=None):
        self.uploads.append(field_name)
        return UploadResult(url=CLOUD_URL, secure_url=CLOUD_URL, path=CLOUD_URL, size=len(content))

    def list_media(self):
        return [MediaItem(id="kashish_art_india/a", filename="a", url=CLOUD_URL, type="image", source="cloudinary")]


def test_local_media_listing(client, admin_headers, local_storage, png_bytes):
    saved = local_storage.save(png_bytes, original_filename="a.png", field_name="images")
    local_storage.save(png_bytes, original_filename="b.png", field_name="cover_image", folder="blogs")

    response = client.get("/api/media", headers=admin_headers)

    assert response.status_code == 200
    media = {m["id"]: m for m in response.json()["media"]}
    assert len(media) == 2
    assert media[saved.filename]["url"] == f"http://localhost:5000/uploads/{saved.filename}"
    assert media[saved.filename]["type"] == "image"


def test_media_requires_admin(client):
    assert client.get("/api/media").status_code == 401


def test_cloudinary_media_not_configured(client, admin_headers):
    assert client.get("/api/media/cloudinary", headers=admin_headers).status_code == 503


def test_cloudinary_listing_and_upload(client, admin_headers, png_bytes):
    remote = FakeCloudinary()
    client.app.dependency_overrides[get_remote_media] = lambda: remote

    listing = client.get("/api/media/cloudinary", headers=admin_headers).json()
    assert listing["media"][0]["url"] == CLOUD_URL

    response = client.post(
        "/api/media/upload",
        files=[("file", ("a.png", png_bytes, "image/png"))],
        headers=admin_headers,
    )
    assert response.json() == {"success": True, "url": CLOUD_URL, "size": len(png_bytes)}
    assert remote.uploads == ["file"]

    response = client.post("/api/media/upload", data={"note": "no file"}, headers=admin_headers)
    assert response.status_code == 400


def test_contact_sends_both_emails(client, mailer):
    body = {"name": "Ravi", "email": "ravi@example.com", "subject": "Commission", "message": "Hello"}

    response = client.post("/api/email/contact", json=body)

    assert response.status_code == 200
    assert response.json()["acknowledge_email_sent"] is True
    assert mailer.kinds() == ["contact", "contact_ack"]


def test_contact_requires_all_fields(client, mailer):
    response = client.post("/api/email/contact", json={"name": "Ravi", "email": "ravi@example.com"})
    assert response.status_code == 400
    assert mailer.sent == []


def test_contact_admin_failure_is_an_error(client, mailer):
    mailer.fail = True
    body = {"name": "Ravi", "email": "ravi@example.com", "subject": "Hi", "message": "Hello"}
    assert client.post("/api/email/contact", json=body).status_code == 500
