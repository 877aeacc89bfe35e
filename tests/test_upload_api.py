import os

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + bytes(range(200))


def _stored(upload_dir):
    return sorted(os.listdir(upload_dir))


def test_upload_then_fetch_returns_identical_bytes(client, auth_headers, upload_dir):
    resp = client.post("/upload", headers=auth_headers, files={"file": ("photo.PNG", PNG_BYTES, "image/png")})

    assert resp.status_code == 200
    body = resp.json()
    assert body["message"] == "File uploaded successfully"
    assert body["file"].endswith(".png")
    assert body["url"] == f"http://files.test/files/{body['file']}"
    assert _stored(upload_dir) == [body["file"]]

    fetched = client.get(f"/files/{body['file']}")
    assert fetched.status_code == 200
    assert fetched.content == PNG_BYTES
    assert fetched.headers["content-type"] == "image/png"


def test_upload_requires_secret(client, upload_dir):
    files = {"file": ("photo.png", PNG_BYTES, "image/png")}

    missing = client.post("/upload", files=files)
    wrong = client.post("/upload", headers={"x-upload-secret": "nope"}, files=files)

    for resp in (missing, wrong):
        assert resp.status_code == 401
        assert resp.json()["error"] == "Unauthorized"
    assert _stored(upload_dir) == []


def test_upload_rejects_disallowed_extension(client, auth_headers, upload_dir):
    resp = client.post("/upload", headers=auth_headers, files={"file": ("setup.exe", b"MZ...", "application/octet-stream")})

    assert resp.status_code == 400
    assert resp.json()["error"] == "Only image files are allowed!"
    assert _stored(upload_dir) == []


def test_upload_too_large_leaves_nothing(client, auth_headers, upload_dir):
    resp = client.post("/upload", headers=auth_headers, files={"file": ("big.jpg", b"x" * 4096, "image/jpeg")})

    assert resp.status_code == 413
    body = resp.json()
    assert body["error"] == "File too large. Max size is 1024 bytes (1KB)."
    assert body["details"]["max_size"] == 1024
    assert body["details"]["max_size_human"] == "1KB"
    assert _stored(upload_dir) == []


def test_declared_length_rejected_up_front(client, auth_headers, upload_dir):
    resp = client.post("/upload", headers=auth_headers, files={"file": ("huge.jpg", b"x" * (64 * 1024), "image/jpeg")})
    assert resp.status_code == 413
    assert _stored(upload_dir) == []


def test_upload_without_file_field(client, auth_headers, upload_dir):
    body = (
        b"--XBOUNDARY\r\n"
        b'Content-Disposition: form-data; name="note"\r\n\r\n'
        b"hello\r\n"
        b"--XBOUNDARY--\r\n"
    )
    resp = client.post(
        "/upload",
        headers={**auth_headers, "content-type": "multipart/form-data; boundary=XBOUNDARY"},
        content=body,
    )

    assert resp.status_code == 400
    assert resp.json()["error"] == "No file uploaded"
    assert _stored(upload_dir) == []


def test_upload_rejects_non_multipart_body(client, auth_headers):
    resp = client.post("/upload", headers=auth_headers, data={"file": "not a file"})
    assert resp.status_code == 400
    assert resp.json()["type"] == "MalformedUpload"


def test_upload_rejects_truncated_multipart(client, auth_headers, upload_dir):
    body = (
        b"--XBOUNDARY\r\n"
        b'Content-Disposition: form-data; name="file"; filename="a.png"\r\n'
        b"Content-Type: image/png\r\n\r\n"
        b"partial bytes"
    )
    resp = client.post(
        "/upload",
        headers={**auth_headers, "content-type": "multipart/form-data; boundary=XBOUNDARY"},
        content=body,
    )
    assert resp.status_code == 400
    assert _stored(upload_dir) == []


def test_error_body_carries_request_id(client):
    resp = client.post("/upload", headers={"X-Request-ID": "req-123"})
    assert resp.status_code == 401
    assert resp.headers["X-Request-ID"] == "req-123"
    assert resp.json()["request_id"] == "req-123"
    assert resp.json()["code"] == 30001


def test_uploads_get_distinct_names(client, auth_headers, upload_dir):
    names = set()
    for _ in range(3):
        resp = client.post("/upload", headers=auth_headers, files={"file": ("same.gif", b"GIF89a", "image/gif")})
        names.add(resp.json()["file"])
    assert len(names) == 3
    assert _stored(upload_dir) == sorted(names)
