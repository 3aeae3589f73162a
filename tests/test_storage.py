import asyncio
import io

import pytest
from starlette.datastructures import Headers, UploadFile

from artgallery.services.storage import UploadError, UploadService, media_item_for, validate_image


def make_upload(content, filename="photo.png", content_type="image/png"):
    return UploadFile(
        file=io.BytesIO(content),
        filename=filename,
        headers=Headers({"content-type": content_type}),
    )


def test_local_save_names_file_after_field(local_storage, png_bytes):
    result = local_storage.save(
        png_bytes, original_filename="Sunset.PNG", field_name="images", content_type="image/png"
    )

    assert result.filename.startswith("images-")
    assert result.filename.endswith(".png")
    assert result.url is None
    assert (local_storage.base_dir / result.filename).is_file()


def test_local_save_into_subfolder(local_storage, png_bytes):
    result = local_storage.save(
        png_bytes, original_filename="cover.png", field_name="cover_image", folder="blogs"
    )

    assert result.filename.startswith("blogs/cover_image-")
    assert (local_storage.base_dir / result.filename).is_file()
    assert [rel for rel, _ in local_storage.list_files()] == [result.filename]


def test_extension_falls_back_to_content_type(local_storage, png_bytes):
    result = local_storage.save(
        png_bytes, original_filename="blob", field_name="image", content_type="image/webp"
    )
    assert result.filename.endswith(".webp")


def test_validate_rejects_non_images(png_bytes):
    with pytest.raises(UploadError, match="Only image files"):
        validate_image(b"%PDF-1.4", "application/pdf", max_bytes=1024)


def test_validate_rejects_oversized(png_bytes):
    with pytest.raises(UploadError, match="too large"):
        validate_image(png_bytes, "image/png", max_bytes=10)


def test_validate_rejects_corrupt_image():
    with pytest.raises(UploadError, match="not a valid image"):
        validate_image(b"not really a png", "image/png", max_bytes=1024)


def test_upload_service_stores_locally(uploader, png_bytes):
    result = asyncio.run(uploader.store(make_upload(png_bytes), field_name="image_0"))

    assert result.filename.startswith("image_0-")
    assert (uploader.local.base_dir / result.filename).is_file()


def test_upload_service_routes_to_remote(local_storage, png_bytes):
    class FakeRemote:
        def __init__(self):
            self.calls = []

        def upload(self, content, *, field_name, content_type=None, folder=None):
            from artgallery.models import UploadResult

            self.calls.append((field_name, folder))
            url = "https://res.cloudinary.com/demo/image/upload/v1/x.png"
            return UploadResult(url=url, secure_url=url, path=url, field_name=field_name)

    remote = FakeRemote()
    service = UploadService(local=local_storage, remote=remote)
    result = asyncio.run(service.store(make_upload(png_bytes), field_name="image", folder="blogs"))

    assert result.url.startswith("https://res.cloudinary.com/")
    assert remote.calls == [("image", "blogs")]
    assert local_storage.list_files() == []


def test_media_item_reads_dimensions(local_storage, png_bytes):
    saved = local_storage.save(png_bytes, original_filename="a.png", field_name="images")
    item = media_item_for(saved.filename, local_storage.base_dir / saved.filename, "http://x/uploads/a.png")

    assert item.type == "image"
    assert (item.width, item.height) == (4, 4)
    assert item.size == len(png_bytes)
