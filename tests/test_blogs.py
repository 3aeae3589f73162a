import pytest

CONTENT = "word " * 450


def create_blog(client, headers, files=None, **fields):
    data = {"title": "Madhubani Painting Basics", "content": CONTENT, "summary": "An introduction", **fields}
    response = client.post("/api/blogs", data=data, files=files, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]


def test_create_derives_slug_read_time_and_author(client, admin_headers, settings):
    post = create_blog(client, admin_headers, tags="folk,bihar", is_published="true")

    assert post["slug"] == "madhubani-painting-basics"
    assert post["read_time"] == 3
    assert post["author"] == settings.admin_email
    assert post["tags"] == ["folk", "bihar"]
    assert post["url"] == "/blog/madhubani-painting-basics"


def test_duplicate_titles_get_unique_slugs(client, admin_headers):
    first = create_blog(client, admin_headers)
    second = create_blog(client, admin_headers)
    assert first["slug"] == "madhubani-painting-basics"
    assert second["slug"] == "madhubani-painting-basics-2"


def test_required_fields(client, admin_headers):
    response = client.post("/api/blogs", data={"title": "Only a title"}, headers=admin_headers)
    assert response.status_code == 400


def test_cover_upload_goes_to_blog_folder(client, admin_headers, png_bytes, settings):
    files = [("cover_image", ("cover.png", png_bytes, "image/png"))]
    post = create_blog(client, admin_headers, files=files)

    assert post["cover_image"].startswith("http://localhost:5000/uploads/blogs/cover_image-")
    cover = settings.uploads_dir / post["cover_image"].split("/uploads/", 1)[1]
    assert cover.is_file()

    response = client.delete(f"/api/blogs/{post['id']}", headers=admin_headers)
    assert response.json()["cleanup"]["status"] == "deleted"
    assert not cover.exists()


def test_cloudinary_cover_url_is_kept(client, admin_headers):
    url = "https://res.cloudinary.com/demo/image/upload/v1/cover.jpg"
    post = create_blog(client, admin_headers, cloudinary_cover_image=url)
    assert post["cover_image"] == url


def test_public_only_sees_published_posts(client, admin_headers):
    create_blog(client, admin_headers, title="Draft", is_published="false")
    create_blog(client, admin_headers, title="Live", is_published="true")

    public = client.get("/api/blogs").json()
    assert [p["title"] for p in public["data"]] == ["Live"]
    assert public["total"] == 1

    admin = client.get("/api/blogs", headers=admin_headers).json()
    assert admin["total"] == 2


def test_unpublished_post_is_forbidden_to_public(client, admin_headers):
    draft = create_blog(client, admin_headers, title="Secret draft")

    assert client.get(f"/api/blogs/slug/{draft['slug']}").status_code == 403
    assert client.get(f"/api/blogs/{draft['id']}").status_code == 403
    assert client.get(f"/api/blogs/slug/{draft['slug']}", headers=admin_headers).status_code == 200


def test_unknown_slug(client):
    assert client.get("/api/blogs/slug/nothing-here").status_code == 404


def test_pagination_and_filters(client, admin_headers):
    for i in range(3):
        create_blog(client, admin_headers, title=f"Post {i}", tags="oil" if i else "clay", is_published="true")

    page = client.get("/api/blogs", params={"limit": 2, "page": 1}).json()
    assert page["count"] == 2
    assert page["pagination"] == {"total_pages": 2, "current_page": 1, "has_more": True}

    oil = client.get("/api/blogs", params={"tag": "oil"}).json()
    assert oil["total"] == 2
    found = client.get("/api/blogs", params={"search": "post 0"}).json()
    assert [p["title"] for p in found["data"]] == ["Post 0"]
    assert client.get("/api/blogs/tags").json()["data"] == ["clay", "oil"]


def test_new_title_regenerates_slug(client, admin_headers):
    post = create_blog(client, admin_headers)

    response = client.put(
        f"/api/blogs/{post['id']}",
        data={"title": "Warli Art Explained", "content": "short"},
        headers=admin_headers,
    )

    updated = response.json()["data"]
    assert updated["slug"] == "warli-art-explained"
    assert updated["read_time"] == 1


def test_toggle_publish(client, admin_headers):
    post = create_blog(client, admin_headers)

    first = client.patch(f"/api/blogs/{post['id']}/publish", headers=admin_headers).json()["data"]
    second = client.patch(f"/api/blogs/{post['id']}/publish", headers=admin_headers).json()["data"]

    assert first["is_published"] is True
    assert second["is_published"] is False


@pytest.mark.parametrize("method, path", [("post", "/api/blogs"), ("patch", "/api/blogs/x/publish")])
def test_admin_routes_require_token(client, method, path):
    assert getattr(client, method)(path).status_code == 401
