"""Local disk storage for uploaded blobs.

Blobs are written under ``settings.upload_dir`` with a generated unique name
and served by the static mount at ``settings.media_url_prefix``.
"""

import logging
import os
import secrets
import time
from pathlib import Path
from typing import Optional

from .core.config import settings
from .exceptions import StorageError

logger = logging.getLogger(__name__)


class LocalStorage:
    """Write, locate and remove blobs in a single directory."""

    def __init__(self, root: Optional[str] = None, url_prefix: Optional[str] = None):
        self.root = Path(root or settings.upload_dir)
        self.url_prefix = (url_prefix or settings.media_url_prefix).rstrip("/")

    def ensure_root(self) -> None:
        self.root.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def generate_key(original_name: str) -> str:
        """Unique blob name keeping the original extension: ``files-<ms>-<rand>.png``."""
        ext = os.path.splitext(original_name)[1].lower()
        if not ext[1:].isalnum():
            ext = ""
        return f"files-{int(time.time() * 1000)}-{secrets.randbelow(10**9):09d}{ext}"

    def url_for(self, key: str) -> str:
        return f"{self.url_prefix}/{key}"

    def path_for(self, key: str) -> Path:
        path = (self.root / key).resolve()
        if path.parent != self.root.resolve():
            raise StorageError(f"Invalid storage key: {key}")
        return path

    def save(self, key: str, data: bytes) -> str:
        """Write *data* under *key* and return its public URL."""
        self.ensure_root()
        path = self.path_for(key)
        try:
            with open(path, "xb") as fh:
                fh.write(data)
        except OSError as e:
            raise StorageError(f"Could not store {key}", original_error=e) from e
        logger.debug("Stored blob", extra={"key": key, "bytes": len(data)})
        return self.url_for(key)

    def delete(self, key: str) -> bool:
        """Remove a blob. Missing blobs are not an error; returns whether one was removed."""
        path = self.path_for(key)
        try:
            path.unlink()
        except FileNotFoundError:
            logger.warning("Blob already missing", extra={"key": key})
            return False
        except OSError as e:
            raise StorageError(f"Could not remove {key}", original_error=e) from e
        return True


def get_storage() -> LocalStorage:
    """FastAPI dependency; override in tests to redirect blobs."""
    return LocalStorage()
