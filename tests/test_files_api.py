import os
import time


def _upload(client, headers, name="pic.png", data=b"img"):
    resp = client.post("/upload", headers=headers, files={"file": (name, data, "application/octet-stream")})
    assert resp.status_code == 200
    return resp.json()["file"]


def test_listing_returns_uploads_newest_first(client, auth_headers, upload_dir):
    names = [_upload(client, auth_headers, f"p{i}.png", b"x" * (i + 1)) for i in range(3)]
    now = time.time()
    # Spread mtimes so ordering does not depend on filesystem timestamp granularity
    for age, name in zip((30, 20, 10), names):
        os.utime(upload_dir / name, (now - age, now - age))

    resp = client.get("/api/files")

    assert resp.status_code == 200
    listing = resp.json()
    assert [entry["name"] for entry in listing] == list(reversed(names))
    newest = listing[0]
    assert newest["size"] == 3
    assert newest["url"] == f"http://files.test/files/{names[2]}"
    assert newest["mtime"].endswith("Z")


def test_listing_needs_no_secret_and_skips_other_files(client, upload_dir):
    (upload_dir / "readme.txt").write_text("not an image")
    (upload_dir / "photo.webp").write_bytes(b"webp")
    (upload_dir / "sub.png").mkdir()

    resp = client.get("/api/files")

    assert resp.status_code == 200
    assert [entry["name"] for entry in resp.json()] == ["photo.webp"]


def test_delete_removes_file_from_listing_and_retrieval(client, auth_headers, upload_dir):
    name = _upload(client, auth_headers)

    resp = client.delete(f"/api/files/{name}", headers=auth_headers)

    assert resp.status_code == 200
    assert resp.json() == {"message": "File deleted successfully"}
    assert client.get("/api/files").json() == []
    assert client.get(f"/files/{name}").status_code == 404
    assert not (upload_dir / name).exists()


def test_delete_missing_file_is_404(client, auth_headers):
    resp = client.delete("/api/files/00000000-0000-4000-8000-000000000000.png", headers=auth_headers)
    assert resp.status_code == 404
    assert resp.json()["error"] == "File not found"


def test_delete_requires_secret(client, auth_headers, upload_dir):
    name = _upload(client, auth_headers)

    assert client.delete(f"/api/files/{name}").status_code == 401
    assert client.delete(f"/api/files/{name}", headers={"x-upload-secret": "wrong"}).status_code == 401
    assert (upload_dir / name).exists()


def test_delete_traversal_never_leaves_storage(client, auth_headers, upload_dir):
    victim = upload_dir.parent / "victim.png"
    victim.write_bytes(b"keep me")

    for path in ("/api/files/..%2Fvictim.png", "/api/files/..%5Cvictim.png", "/api/files/%2E%2E"):
        resp = client.delete(path, headers=auth_headers)
        assert resp.status_code == 400, path

    assert victim.read_bytes() == b"keep me"


def test_retrieval_hides_traversal_and_unlisted_files(client, upload_dir):
    (upload_dir.parent / "secret.png").write_bytes(b"outside")
    (upload_dir / "notes.txt").write_text("hidden")

    assert client.get("/files/..%2Fsecret.png").status_code == 404
    assert client.get("/files/notes.txt").status_code == 404
    assert client.get("/files/missing.png").status_code == 404


def test_head_request_on_stored_file(client, auth_headers):
    name = _upload(client, auth_headers, data=b"12345")
    resp = client.head(f"/files/{name}")
    assert resp.status_code == 200
    assert resp.headers["content-length"] == "5"


def test_index_page_and_health(client):
    index = client.get("/")
    assert index.status_code == 200
    assert "text/html" in index.headers["content-type"]
    assert "x-upload-secret" in index.text

    assert client.get("/health").json() == {"status": "healthy"}


def test_dot_prefixed_image_round_trips_through_the_api(client, auth_headers, upload_dir):
    (upload_dir / ".cover.png").write_bytes(b"cover")

    listing = client.get("/api/files").json()
    assert [entry["name"] for entry in listing] == [".cover.png"]

    fetched = client.get("/files/.cover.png")
    assert fetched.status_code == 200
    assert fetched.content == b"cover"

    assert client.delete("/api/files/.cover.png", headers=auth_headers).status_code == 200
    assert client.get("/api/files").json() == []


def test_retrieval_uses_stored_content_type(client, upload_dir):
    (upload_dir / "anim.gif").write_bytes(b"GIF89a")

    resp = client.get("/files/anim.gif")

    assert resp.status_code == 200
    assert resp.headers["content-type"] == "image/gif"
    assert resp.headers["content-length"] == "6"


def test_empty_stored_file_is_served(client, upload_dir):
    (upload_dir / "empty.png").write_bytes(b"")

    resp = client.get("/files/empty.png")

    assert resp.status_code == 200
    assert resp.content == b""


def test_file_deleted_after_lookup_is_404(client, upload_dir, monkeypatch):
    from application.services.stored_file_service import StoredFileService

    (upload_dir / "vanish.png").write_bytes(b"soon gone")
    original = StoredFileService.get_file

    async def get_then_delete(self, name):
        stored = await original(self, name)
        (upload_dir / name).unlink()
        return stored

    monkeypatch.setattr(StoredFileService, "get_file", get_then_delete)

    resp = client.get("/files/vanish.png")

    assert resp.status_code == 404
    assert resp.json()["error"] == "File not found"
