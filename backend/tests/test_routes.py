"""HTTP boundary tests with the converter replaced by an in-process fake."""
import io
import zipfile

import pytest
from fastapi.testclient import TestClient

from app.conversion.service import ConversionService, get_conversion_service
from app.main import app

from conftest import FakeConverter


@pytest.fixture
def converter():
    return FakeConverter(fail_on=lambda data: data.startswith(b"bad"))


@pytest.fixture
def client(converter, temp_dir):
    svc = ConversionService(converter, temp_dir=temp_dir)
    app.dependency_overrides[get_conversion_service] = lambda: svc
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
        svc.shutdown()


def _upload(name, data, mime):
    return ("files", (name, io.BytesIO(data), mime))


def test_single_file_returned_directly(client, temp_dir):
    resp = client.post(
        "/api/convert",
        data={"targetFormat": "jpg"},
        files=[_upload("cat.png", b"meow", "image/png")],
    )

    assert resp.status_code == 200
    assert resp.content == b"converted:meow"
    assert resp.headers["content-type"] == "application/octet-stream"
    assert 'attachment; filename="cat.jpg"' in resp.headers["content-disposition"]
    assert resp.headers["x-skipped-files"] == "0"
    assert list(temp_dir.iterdir()) == []


def test_download_name_keeps_original_stem(client):
    resp = client.post(
        "/api/convert",
        data={"targetFormat": "png"},
        files=[_upload("my photo (1).bmp", b"px", "image/bmp")],
    )

    assert resp.status_code == 200
    assert 'filename="my photo (1).png"' in resp.headers["content-disposition"]


def test_partial_failure_returns_zip_of_successes(client, temp_dir):
    resp = client.post(
        "/api/convert",
        data={"targetFormat": "mp3"},
        files=[
            _upload("a.mp4", b"one", "video/mp4"),
            _upload("b.wav", b"bad", "audio/wav"),
            _upload("c.mp3", b"three", "audio/mpeg"),
        ],
    )

    assert resp.status_code == 200
    assert resp.headers["content-type"] == "application/zip"
    assert 'filename="converted.zip"' in resp.headers["content-disposition"]
    assert resp.headers["x-skipped-files"] == "1"
    with zipfile.ZipFile(io.BytesIO(resp.content)) as zf:
        assert zf.namelist() == ["a.mp3", "c.mp3"]
        assert zf.read("c.mp3") == b"converted:three"
    assert list(temp_dir.iterdir()) == []


def test_all_failures_is_server_error(client, temp_dir):
    resp = client.post(
        "/api/convert",
        data={"targetFormat": "png"},
        files=[_upload("a.png", b"bad1", "image/png"), _upload("b.png", b"bad2", "image/png")],
    )

    assert resp.status_code == 500
    assert resp.json()["detail"].startswith("Server error")
    assert list(temp_dir.iterdir()) == []


@pytest.mark.parametrize(
    "target,files,fragment",
    [
        ("png", [], "No files"),
        ("png", [_upload(f"{i}.png", b"x", "image/png") for i in range(6)], "at most 5"),
        ("ogg", [_upload("a.png", b"x", "image/png")], "'ogg'"),
        ("png", [_upload("a.png", b"", "image/png")], "empty"),
        ("png", [_upload("a.gif", b"x", "image/gif")], "image/gif"),
        ("mp4", [_upload("a.png", b"x", "image/png")], "IMAGE to VIDEO"),
    ],
)
def test_validation_errors_are_client_errors(client, converter, target, files, fragment):
    resp = client.post("/api/convert", data={"targetFormat": target}, files=files or None)

    assert resp.status_code == 400
    assert fragment in resp.json()["detail"]
    assert converter.calls == []


def test_oversized_file_rejected(client, converter):
    big = b"x" * (10 * 1024 * 1024 + 1)
    resp = client.post(
        "/api/convert",
        data={"targetFormat": "wav"},
        files=[_upload("big.wav", big, "audio/wav")],
    )
    assert resp.status_code == 400
    assert "too large" in resp.json()["detail"]
    assert converter.calls == []


def test_info_endpoints(client):
    assert client.get("/api/health").json() == {"status": "ok"}
    limits = client.get("/api/limits").json()
    assert limits["max_files_per_batch"] == 5
    assert limits["max_file_size_bytes"] == 10 * 1024 * 1024
    formats = client.get("/api/formats").json()
    assert formats["image"]["extensions"] == ["bmp", "jpeg", "jpg", "png"]
