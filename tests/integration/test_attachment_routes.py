import os

import httpx
from fastapi.testclient import TestClient

from tests.fakes import BASIC_ID, BASIC_PASS, UPLOAD_URL, FakeWorksApi, basic_auth_header
from works_gateway.main import create_app


def _staged_files(settings):
    return os.listdir(settings.UPLOAD_DIR) if os.path.isdir(settings.UPLOAD_DIR) else []


def test_upload_returns_file_id_and_cleans_up(client: TestClient, fake_api: FakeWorksApi, settings):
    r = client.post("/attachments", files={"file": ("note.txt", b"hello", "text/plain")})

    assert r.status_code == 200
    assert r.json() == {"fileId": "file-1"}
    assert [str(c.url) for c in fake_api.attachment_calls][-1] == UPLOAD_URL
    assert _staged_files(settings) == []


def test_missing_file_is_400_without_calls(client: TestClient, fake_api: FakeWorksApi, settings):
    r = client.post("/attachments", data={"other": "x"})

    assert r.status_code == 400
    assert r.json()["code"] == "validation_error"
    assert fake_api.requests == []
    assert _staged_files(settings) == []


def test_failed_upload_is_500_and_cleans_up(client: TestClient, fake_api: FakeWorksApi, settings):
    fake_api.upload_status = 500

    r = client.post("/attachments", files={"file": ("note.txt", b"hello", "text/plain")})

    assert r.status_code == 500
    assert r.json()["code"] == "transfer_error"
    assert _staged_files(settings) == []


def test_staging_mode_returns_file_details(settings, fake_api: FakeWorksApi):
    settings.ATTACHMENT_STAGING_ONLY = True
    app = create_app(settings, transport=httpx.MockTransport(fake_api))

    with TestClient(app, headers=basic_auth_header(BASIC_ID, BASIC_PASS)) as client:
        r = client.post("/attachments", files={"file": ("pic.png", b"\x89PNG", "image/png")})

    assert r.status_code == 200
    body = r.json()
    assert body["filename"] == "pic.png"
    assert body["mimetype"] == "image/png"
    assert body["size"] == 4
    assert os.path.exists(body["path"])
    assert fake_api.requests == []


def test_download_streams_file(client: TestClient, fake_api: FakeWorksApi):
    r = client.get("/attachments/file-1")

    assert r.status_code == 200
    assert r.content == b"file-bytes"
    assert r.headers["content-type"] == "image/png"
    assert r.headers["content-disposition"] == 'attachment; filename="pic.png"'


def test_download_default_disposition(client: TestClient, fake_api: FakeWorksApi):
    fake_api.file_headers = {}

    r = client.get("/attachments/file-1")

    assert r.status_code == 200
    assert r.headers["content-disposition"] == 'attachment; filename="file-1"'


def test_download_unknown_file_is_404(client: TestClient, fake_api: FakeWorksApi):
    fake_api.resolve_status = 404

    r = client.get("/attachments/nope")

    assert r.status_code == 404
    assert r.json()["code"] == "not_found"
