"""Shared test fixtures for the media API test suite.

Tests run against a throwaway SQLite database and a temporary upload
directory, both created before any application import. Every test starts
from empty tables and an empty upload directory.
"""

import os
import shutil
import tempfile
from pathlib import Path

# Test modules import this file as tests.conftest too; both imports share one directory.
if "MEDIATHEQUE_TEST_DIR" not in os.environ:
    os.environ["MEDIATHEQUE_TEST_DIR"] = tempfile.mkdtemp(prefix="mediatheque-tests-")
_WORKDIR = Path(os.environ["MEDIATHEQUE_TEST_DIR"])
UPLOAD_DIR = _WORKDIR / "uploads"

os.environ["DATABASE_URL"] = os.environ.get(
    "TEST_DATABASE_URL", f"sqlite:///{_WORKDIR / 'test.db'}"
)
os.environ["UPLOAD_DIR"] = str(UPLOAD_DIR)
os.environ["AUTH_ENABLED"] = "false"
os.environ["LOG_FORMAT"] = "text"

import pytest
from fastapi.testclient import TestClient

from mediatheque.database import SessionLocal
from mediatheque.main import app
from mediatheque.models import MediaFile, MediaFolder
from mediatheque.storage import LocalStorage

# Smallest valid-looking payloads; content is never decoded.
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 92
PDF_BYTES = b"%PDF-1.4\n" + b"0" * 191


@pytest.fixture(autouse=True)
def _clean_state():
    """Empty both tables and the upload directory before each test."""
    db = SessionLocal()
    try:
        db.query(MediaFile).delete()
        # Detach first so rows can go in any order, even after a forced cycle.
        db.query(MediaFolder).update({MediaFolder.parent_id: None}, synchronize_session=False)
        db.query(MediaFolder).delete(synchronize_session=False)
        db.commit()
    finally:
        db.close()

    shutil.rmtree(UPLOAD_DIR, ignore_errors=True)
    UPLOAD_DIR.mkdir(parents=True, exist_ok=True)
    yield


@pytest.fixture()
def db():
    """Per-test database session."""
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture()
def storage() -> LocalStorage:
    return LocalStorage(root=str(UPLOAD_DIR), url_prefix="/uploads")


@pytest.fixture()
def client():
    with TestClient(app) as c:
        yield c


def make_folder(client, name: str, parent_id: str = None) -> dict:
    """Create a folder through the API and return its JSON."""
    payload = {"name": name}
    if parent_id:
        payload["parent_id"] = parent_id
    resp = client.post("/api/media/folders", json=payload)
    assert resp.status_code == 201, resp.text
    return resp.json()


def upload(client, files, folder_id: str = None):
    """POST a batch. *files* is a list of ``(filename, bytes, content_type)``."""
    data = {"folder_id": folder_id} if folder_id else {}
    return client.post(
        "/api/media/upload",
        files=[("files", f) for f in files],
        data=data,
    )
