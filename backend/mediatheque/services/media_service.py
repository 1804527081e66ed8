"""File metadata operations: filtered listing, edit, move, delete and stats."""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from ..exceptions import StorageError, ValidationError
from ..models import MediaFile
from ..repositories import FolderRepository, MediaFileRepository
from ..schemas.media import FileType, FilesByType, MediaFileUpdate, MediaStatsResponse
from ..storage import LocalStorage

logger = logging.getLogger(__name__)

MAX_FILE_NAME_LENGTH = 255
MAX_ALT_TEXT_LENGTH = 255

DOCUMENT_MIME_TYPES = frozenset({
    "application/pdf",
    "application/msword",
    "application/rtf",
    "application/vnd.ms-excel",
    "application/vnd.ms-powerpoint",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "application/vnd.openxmlformats-officedocument.presentationml.presentation",
    "application/vnd.oasis.opendocument.text",
    "application/vnd.oasis.opendocument.spreadsheet",
    "application/vnd.oasis.opendocument.presentation",
})


def classify_mime_type(mime_type: str) -> FileType:
    """Map a MIME type onto image / video / document / other."""
    mime_type = (mime_type or "").split(";")[0].strip().lower()
    if mime_type.startswith("image/"):
        return FileType.IMAGE
    if mime_type.startswith("video/"):
        return FileType.VIDEO
    if mime_type in DOCUMENT_MIME_TYPES or mime_type.startswith("text/"):
        return FileType.DOCUMENT
    return FileType.OTHER


class MediaService:
    """File registry on the server side.

    Public methods:
        list_files      -- files in one folder, filtered by search and type
        get_file
        update_metadata -- name / alt text / description only
        move_file       -- relocate to another folder or root
        delete_file     -- remove row and blob
        compute_stats   -- aggregate counts and sizes
    """

    def __init__(self, db: Session, storage: Optional[LocalStorage] = None):
        self.db = db
        self.file_repo = MediaFileRepository(db)
        self.folder_repo = FolderRepository(db)
        self.storage = storage or LocalStorage()

    def list_files(
        self,
        folder_id: Optional[str] = None,
        search: Optional[str] = None,
        file_type: Optional[FileType] = None,
    ) -> List[MediaFile]:
        if folder_id is not None:
            self.folder_repo.get_by_id(folder_id)
        search = search.strip() if search else None
        return self.file_repo.list_in_folder(
            folder_id,
            search=search or None,
            file_type=file_type.value if file_type else None,
        )

    def get_file(self, file_id: str) -> MediaFile:
        return self.file_repo.get_by_id(file_id)

    def update_metadata(self, file_id: str, data: MediaFileUpdate) -> MediaFile:
        media_file = self.file_repo.get_by_id(file_id)

        if data.name is not None:
            name = data.name.strip()
            if not name:
                raise ValidationError("File name cannot be empty", field="name")
            if len(name) > MAX_FILE_NAME_LENGTH:
                raise ValidationError(
                    f"File name cannot exceed {MAX_FILE_NAME_LENGTH} characters", field="name"
                )
            media_file.name = name
        if data.alt_text is not None:
            alt_text = data.alt_text.strip()
            if len(alt_text) > MAX_ALT_TEXT_LENGTH:
                raise ValidationError(
                    f"Alt text cannot exceed {MAX_ALT_TEXT_LENGTH} characters", field="alt_text"
                )
            media_file.alt_text = alt_text
        if data.description is not None:
            media_file.description = data.description

        self.db.commit()
        self.db.refresh(media_file)
        return media_file

    def move_file(self, file_id: str, folder_id: Optional[str]) -> MediaFile:
        media_file = self.file_repo.get_by_id(file_id)
        if folder_id is not None:
            self.folder_repo.get_by_id(folder_id)

        media_file.folder_id = folder_id
        self.db.commit()
        self.db.refresh(media_file)
        logger.info("File moved", extra={"file_id": file_id, "folder_id": folder_id})
        return media_file

    def delete_file(self, file_id: str) -> str:
        """Remove the row, then the blob. Returns the deleted file's name."""
        media_file = self.file_repo.get_by_id(file_id)
        key, name = media_file.storage_key, media_file.name

        self.file_repo.delete(media_file)
        self.db.commit()

        try:
            self.storage.delete(key)
        except StorageError as e:
            logger.warning("Blob left behind after file delete", extra={"key": key, "error": e.message})

        logger.info("File deleted", extra={"file_id": file_id})
        return name

    def compute_stats(self) -> MediaStatsResponse:
        """Recomputed from the table on every call."""
        total_files, total_size = self.file_repo.totals()
        by_type = self.file_repo.count_by_type()
        return MediaStatsResponse(
            total_files=total_files,
            total_size=total_size,
            files_by_type=FilesByType(**{t.value: by_type.get(t.value, 0) for t in FileType}),
        )
