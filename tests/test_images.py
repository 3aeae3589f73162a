import pytest

from artgallery.config import Settings
from artgallery.models import UploadResult
from artgallery.services.images import ImageResolutionError, ImageResolver, is_remote

REMOTE_URL = "https://res.cloudinary.com/demo/image/upload/v1/x.jpg"


def test_direct_url_is_used_verbatim(resolver):
    result = UploadResult(url=REMOTE_URL, filename="ignored.png", path="/tmp/ignored.png")
    assert resolver.resolve_upload(result) == REMOTE_URL


def test_remote_path_wins_over_secure_url(resolver):
    result = UploadResult(path=REMOTE_URL, secure_url="https://other.example.com/y.jpg")
    assert resolver.resolve_upload(result) == REMOTE_URL


def test_secure_url_used_when_path_is_local(resolver):
    result = UploadResult(secure_url="https://cdn.example.com/y.jpg", path="/srv/uploads/y.jpg")
    assert resolver.resolve_upload(result) == "https://cdn.example.com/y.jpg"


def test_bare_filename_gets_development_prefix(resolver):
    assert resolver.resolve_upload(UploadResult(filename="abc.png")) == "http://localhost:5000/uploads/abc.png"


def test_bare_filename_gets_production_prefix(tmp_path):
    settings = Settings(_env_file=None, ENVIRONMENT="production", UPLOADS_DIR=tmp_path)
    resolver = ImageResolver.from_settings(settings)
    assert (
        resolver.resolve_upload(UploadResult(filename="abc.png"))
        == "https://kashishartindia-full-stack.onrender.com/uploads/abc.png"
    )


def test_upload_without_any_reference_fails(resolver):
    with pytest.raises(ImageResolutionError):
        resolver.resolve_upload(UploadResult(field_name="images"))


@pytest.mark.parametrize(
    "reference",
    [
        REMOTE_URL,
        "res.cloudinary.com/demo/x.jpg",
        "http://localhost:5000/uploads/abc.png",
        "https://example.com/pictures/abc.png",
    ],
)
def test_remote_and_absolute_references_display_unchanged(resolver, reference):
    assert resolver.resolve_for_display(reference) == reference


@pytest.mark.parametrize(
    "reference, expected",
    [
        ("abc.png", "http://localhost:5000/uploads/abc.png"),
        ("/abc.png", "http://localhost:5000/uploads/abc.png"),
        ("/uploads/abc.png", "http://localhost:5000/uploads/abc.png"),
        ("uploads/abc.png", "http://localhost:5000/uploads/abc.png"),
    ],
)
def test_relative_references_get_prefix(resolver, reference, expected):
    assert resolver.resolve_for_display(reference) == expected


def test_blog_covers_resolve_into_blog_folder(resolver):
    assert resolver.resolve_for_display("cover.jpg", "blogs") == "http://localhost:5000/uploads/blogs/cover.jpg"


def test_empty_reference_displays_as_none(resolver):
    assert resolver.resolve_for_display(None) is None
    assert resolver.resolve_for_display("") is None


def test_marker_substring_decides_remote_storage():
    assert is_remote(REMOTE_URL)
    assert not is_remote("http://localhost:5000/uploads/abc.png")
    # A local file named after the provider is still taken for remote.
    assert is_remote("http://localhost:5000/uploads/my-cloudinary-logo.png")


def test_selected_gallery_url_is_rehosted(resolver):
    assert (
        resolver.normalize_selected_url("https://old-host.example.com/uploads/abc.png")
        == "http://localhost:5000/uploads/abc.png"
    )
    assert resolver.normalize_selected_url(REMOTE_URL) == REMOTE_URL


def test_release_deletes_unreferenced_local_file(resolver, settings):
    settings.uploads_dir.mkdir(parents=True, exist_ok=True)
    target = settings.uploads_dir / "abc.png"
    target.write_bytes(b"x")

    result = resolver.release("http://localhost:5000/uploads/abc.png")

    assert result.status == "deleted"
    assert result.deleted
    assert not target.exists()


def test_release_keeps_file_still_referenced(resolver, settings):
    settings.uploads_dir.mkdir(parents=True, exist_ok=True)
    target = settings.uploads_dir / "abc.png"
    target.write_bytes(b"x")

    result = resolver.release(
        "http://localhost:5000/uploads/abc.png", is_referenced_elsewhere=lambda ref: True
    )

    assert result.status == "still_referenced"
    assert target.exists()


def test_release_never_touches_disk_for_remote(resolver):
    def guard(ref):
        raise AssertionError("remote references must not be looked up")

    result = resolver.release(REMOTE_URL, is_referenced_elsewhere=guard)
    assert result.status == "remote"


def test_release_reports_missing_file(resolver):
    assert resolver.release("http://localhost:5000/uploads/gone.png").status == "missing"


def test_release_swallows_errors(resolver):
    def guard(ref):
        raise RuntimeError("database unavailable")

    result = resolver.release("http://localhost:5000/uploads/abc.png", is_referenced_elsewhere=guard)
    assert result.status == "failed"
    assert "database unavailable" in result.detail


def test_release_refuses_paths_outside_uploads(resolver):
    result = resolver.release("http://localhost:5000/uploads/../../etc/passwd")
    assert result.status == "failed"


def test_release_blog_cover_from_subfolder(resolver, settings):
    folder = settings.uploads_dir / "blogs"
    folder.mkdir(parents=True)
    (folder / "cover.jpg").write_bytes(b"x")

    assert resolver.release("cover.jpg", subfolder="blogs").status == "deleted"
    assert not (folder / "cover.jpg").exists()
