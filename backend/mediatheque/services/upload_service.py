"""Batch upload: validate, store and commit a set of files as one unit.

A batch is all-or-nothing. Every rule is checked before the first byte is
written, and a failure while writing or committing removes the blobs that
were already stored and rolls the transaction back.
"""

import logging
import mimetypes
import os
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.config import settings
from ..exceptions import DatabaseError, StorageError, UploadRejectedError
from ..models import MediaFile
from ..repositories import FolderRepository, MediaFileRepository
from ..schemas.media import FileType
from ..storage import LocalStorage
from .media_service import classify_mime_type

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IncomingFile:
    """One file of an upload batch, already read into memory."""
    filename: str
    content_type: Optional[str]
    data: bytes

    @property
    def display_name(self) -> str:
        name = os.path.basename((self.filename or "").replace("\\", "/")).strip()
        return name[:255] or "unnamed"

    @property
    def mime_type(self) -> str:
        declared = (self.content_type or "").split(";")[0].strip().lower()
        if declared and declared != "application/octet-stream":
            return declared
        guessed, _ = mimetypes.guess_type(self.display_name)
        return (guessed or declared or "application/octet-stream").lower()


class UploadService:
    """Commit upload batches into storage and the media table."""

    def __init__(
        self,
        db: Session,
        storage: Optional[LocalStorage] = None,
        max_files: Optional[int] = None,
        max_size: Optional[int] = None,
        allowed_types: Optional[Sequence[str]] = None,
    ):
        self.db = db
        self.storage = storage or LocalStorage()
        self.file_repo = MediaFileRepository(db)
        self.folder_repo = FolderRepository(db)
        self.max_files = max_files or settings.max_files_per_upload
        self.max_size = max_size or settings.max_upload_size
        self.allowed_types = frozenset(allowed_types or settings.get_allowed_mime_types())

    def validate_batch(self, files: Sequence[IncomingFile]) -> None:
        """Raise UploadRejectedError listing every offending file."""
        if not files:
            raise UploadRejectedError("No files were provided")
        if len(files) > self.max_files:
            raise UploadRejectedError(
                f"Too many files: {len(files)} (maximum {self.max_files} per upload)"
            )

        rejected: List[Dict[str, str]] = []
        for incoming in files:
            if incoming.mime_type not in self.allowed_types:
                rejected.append({"name": incoming.display_name, "reason": f"type {incoming.mime_type} not allowed"})
            elif len(incoming.data) > self.max_size:
                rejected.append({"name": incoming.display_name, "reason": f"larger than {self.max_size} bytes"})
            elif not incoming.data:
                rejected.append({"name": incoming.display_name, "reason": "empty file"})

        if rejected:
            names = ", ".join(r["name"] for r in rejected)
            raise UploadRejectedError(f"Upload rejected: {names}", rejected=rejected)

    def commit_batch(
        self,
        files: Sequence[IncomingFile],
        folder_id: Optional[str],
        uploaded_by: str,
    ) -> List[MediaFile]:
        """Store every file of the batch and create its record, or nothing at all."""
        if folder_id is not None:
            self.folder_repo.get_by_id(folder_id)
        self.validate_batch(files)

        stored_keys: List[str] = []
        records: List[MediaFile] = []
        try:
            for incoming in files:
                key = self.storage.generate_key(incoming.display_name)
                url = self.storage.save(key, incoming.data)
                stored_keys.append(key)

                file_type = classify_mime_type(incoming.mime_type)
                records.append(self.file_repo.add(MediaFile(
                    name=incoming.display_name,
                    original_name=incoming.display_name,
                    type=file_type.value,
                    mime_type=incoming.mime_type,
                    size=len(incoming.data),
                    storage_key=key,
                    url=url,
                    thumbnail_url=url if file_type == FileType.IMAGE else None,
                    folder_id=folder_id,
                    uploaded_by=uploaded_by,
                )))
            self.db.commit()
        except SQLAlchemyError as e:
            self._abort(stored_keys)
            raise DatabaseError("Upload could not be saved", original_error=e) from e
        except StorageError:
            self._abort(stored_keys)
            raise

        for record in records:
            self.db.refresh(record)

        logger.info(
            "Upload committed",
            extra={"count": len(records), "folder_id": folder_id, "bytes": sum(r.size for r in records)},
        )
        return records

    def _abort(self, stored_keys: List[str]) -> None:
        self.db.rollback()
        for key in stored_keys:
            try:
                self.storage.delete(key)
            except StorageError as e:
                logger.error("Could not discard blob of failed upload", extra={"key": key, "error": e.message})
        logger.error("Upload aborted", extra={"discarded": len(stored_keys)})
