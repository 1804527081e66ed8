"""Tests for MediaAPIClient against httpx.MockTransport."""

import asyncio
import json

import httpx
import pytest

from mediatheque_client.api_client import MediaAPIClient
from mediatheque_client.errors import NetworkError, NotFoundError, UploadError, ValidationError
from mediatheque_client.models import FileType, UploadBlob

FOLDER = {
    "id": "fld-1",
    "name": "Logos",
    "parent_id": None,
    "files_count": 2,
    "created_by": "anonymous",
    "created_at": "2024-05-01T10:00:00Z",
    "updated_at": "2024-05-01T10:00:00Z",
}

MEDIA = {
    "id": "med-1",
    "name": "photo.png",
    "original_name": "photo.png",
    "type": "image",
    "mime_type": "image/png",
    "size": 100,
    "url": "/uploads/files-1-000000001.png",
    "thumbnail_url": "/uploads/files-1-000000001.png",
    "folder_id": None,
    "alt_text": None,
    "description": None,
    "uploaded_by": "anonymous",
    "created_at": "2024-05-01T10:00:00Z",
    "updated_at": "2024-05-01T10:00:00Z",
}


def _client(handler, **kwargs) -> MediaAPIClient:
    return MediaAPIClient(base_url="http://media.test", transport=httpx.MockTransport(handler), **kwargs)


def _run(client: MediaAPIClient, coro_factory):
    async def scenario():
        async with client:
            return await coro_factory(client)
    return asyncio.run(scenario())


def _error(status: int, code: str, message: str):
    return httpx.Response(status, json={"error": code, "message": message, "details": {}})


class TestConfiguration:

    def test_defaults_from_environment(self, monkeypatch):
        for var in ("MEDIATHEQUE_API_URL", "MEDIATHEQUE_API_TOKEN", "MEDIATHEQUE_API_TIMEOUT", "MEDIATHEQUE_UPLOAD_TIMEOUT"):
            monkeypatch.delenv(var, raising=False)
        client = MediaAPIClient()
        assert client.base_url == "http://localhost:8000"
        assert client.token == ""
        assert client.timeout == 30.0
        assert client.upload_timeout == 120.0

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("MEDIATHEQUE_API_URL", "http://api.example")
        monkeypatch.setenv("MEDIATHEQUE_API_TIMEOUT", "5")
        monkeypatch.setenv("MEDIATHEQUE_UPLOAD_TIMEOUT", "300")
        client = MediaAPIClient()
        assert client.base_url == "http://api.example"
        assert client.timeout == 5.0
        assert client.upload_timeout == 300.0

    def test_token_is_sent_as_bearer(self):
        seen = {}

        def handler(request):
            seen["auth"] = request.headers.get("authorization")
            return httpx.Response(200, json={"folders": []})

        _run(_client(handler, token="secret-token"), lambda c: c.list_folders())
        assert seen["auth"] == "Bearer secret-token"


class TestParsing:

    def test_list_folders(self):
        def handler(request):
            assert request.url.path == "/api/media/folders"
            return httpx.Response(200, json={"folders": [FOLDER]})

        folders = _run(_client(handler), lambda c: c.list_folders())
        assert folders[0].id == "fld-1"
        assert folders[0].files_count == 2
        assert folders[0].created_at.year == 2024

    def test_list_files_sends_filters(self):
        seen = {}

        def handler(request):
            seen.update(request.url.params)
            return httpx.Response(200, json={"files": [MEDIA]})

        files = _run(
            _client(handler),
            lambda c: c.list_files("fld-1", search="photo", file_type=FileType.IMAGE),
        )
        assert seen == {"folder_id": "fld-1", "search": "photo", "type": "image"}
        assert files[0].type == FileType.IMAGE

    def test_root_listing_omits_folder_param(self):
        seen = {}

        def handler(request):
            seen.update(request.url.params)
            return httpx.Response(200, json={"files": []})

        _run(_client(handler), lambda c: c.list_files("root"))
        assert seen == {}

    def test_schema_mismatch_is_network_error(self):
        def handler(request):
            return httpx.Response(200, json={"folders": [{"id": "fld-1"}]})

        with pytest.raises(NetworkError):
            _run(_client(handler), lambda c: c.list_folders())

    def test_move_folder_to_root_sends_null(self):
        seen = {}

        def handler(request):
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=FOLDER)

        _run(_client(handler), lambda c: c.update_folder("fld-1", parent_id="root"))
        assert seen["body"] == {"parent_id": None}

    def test_rename_leaves_parent_out(self):
        seen = {}

        def handler(request):
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=FOLDER)

        _run(_client(handler), lambda c: c.update_folder("fld-1", name="Logos"))
        assert seen["body"] == {"name": "Logos"}

    def test_update_file_sends_only_given_fields(self):
        seen = {}

        def handler(request):
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={**MEDIA, "alt_text": "Logo"})

        media = _run(_client(handler), lambda c: c.update_file("med-1", alt_text="Logo"))
        assert seen["body"] == {"alt_text": "Logo"}
        assert media.alt_text == "Logo"


class TestErrorMapping:

    def test_404_is_not_found_with_server_message(self):
        def handler(request):
            return _error(404, "FOLDER_NOT_FOUND", "Folder not found: fld-x")

        with pytest.raises(NotFoundError) as exc_info:
            _run(_client(handler), lambda c: c.delete_folder("fld-x"))
        assert exc_info.value.message == "Folder not found: fld-x"
        assert exc_info.value.status_code == 404
        assert exc_info.value.error_code == "FOLDER_NOT_FOUND"

    @pytest.mark.parametrize("status", [400, 422])
    def test_client_errors_are_validation_errors(self, status):
        def handler(request):
            return _error(status, "VALIDATION_ERROR", "Folder name cannot be empty")

        with pytest.raises(ValidationError, match="cannot be empty"):
            _run(_client(handler), lambda c: c.create_folder(" "))

    def test_server_error_without_body_uses_fallback_message(self):
        def handler(request):
            return httpx.Response(502, text="Bad gateway")

        with pytest.raises(NetworkError, match="status 502"):
            _run(_client(handler), lambda c: c.get_stats())

    def test_409_is_network_error_with_message(self):
        def handler(request):
            return _error(409, "DUPLICATE_FOLDER", "A folder named 'Logos' already exists here")

        with pytest.raises(NetworkError, match="already exists"):
            _run(_client(handler), lambda c: c.create_folder("Logos"))

    def test_transport_failure_is_network_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(NetworkError):
            _run(_client(handler), lambda c: c.list_folders())

    def test_timeout_is_network_error(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(NetworkError, match="in time"):
            _run(_client(handler), lambda c: c.delete_file("med-1"))


class TestUpload:

    def test_batch_is_one_multipart_request(self):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(201, json={"files": [MEDIA, {**MEDIA, "id": "med-2"}]})

        blobs = [
            UploadBlob("a.png", b"\x89PNG", "image/png"),
            UploadBlob("b.png", b"\x89PNG", "image/png"),
        ]
        files = _run(_client(handler), lambda c: c.upload(blobs, "fld-1"))

        assert len(requests) == 1
        request = requests[0]
        assert request.url.path == "/api/media/upload"
        assert request.headers["content-type"].startswith("multipart/form-data")
        assert request.content.count(b'name="files"') == 2
        assert b'filename="a.png"' in request.content
        assert b'name="folder_id"' in request.content
        assert b"fld-1" in request.content
        assert [f.id for f in files] == ["med-1", "med-2"]

    def test_rejection_is_upload_error(self):
        def handler(request):
            return _error(400, "UPLOAD_REJECTED", "Upload rejected: b.exe")

        with pytest.raises(UploadError, match="b.exe") as exc_info:
            _run(_client(handler), lambda c: c.upload([UploadBlob("b.exe", b"MZ")]))
        assert exc_info.value.status_code == 400

    def test_timeout_is_upload_error(self):
        def handler(request):
            raise httpx.WriteTimeout("timed out", request=request)

        with pytest.raises(UploadError):
            _run(_client(handler), lambda c: c.upload([UploadBlob("a.png", b"x", "image/png")]))
