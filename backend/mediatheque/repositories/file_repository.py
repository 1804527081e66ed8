"""Repository for media file database operations."""

from typing import Dict, List, Optional, Tuple

from sqlalchemy import func

from ..models import MediaFile
from ..exceptions import MediaFileNotFoundError
from .base import BaseRepository


class MediaFileRepository(BaseRepository[MediaFile]):
    """Data access layer for media files. Never commits; the service does."""

    model_class = MediaFile
    id_prefix = "med"
    not_found_error = MediaFileNotFoundError

    def add(self, media_file: MediaFile) -> MediaFile:
        if not media_file.id:
            media_file.id = self.new_id()
        self.db.add(media_file)
        return media_file

    def list_in_folder(
        self,
        folder_id: Optional[str],
        search: Optional[str] = None,
        file_type: Optional[str] = None,
    ) -> List[MediaFile]:
        """Files directly inside *folder_id* (``None`` = root), newest first.

        *search* is a literal substring of name or original name, compared
        with ``str.casefold`` so accented letters fold on every backend.
        """
        query = self.db.query(MediaFile)
        if folder_id is None:
            query = query.filter(MediaFile.folder_id.is_(None))
        else:
            query = query.filter(MediaFile.folder_id == folder_id)

        if file_type:
            query = query.filter(MediaFile.type == file_type)

        files = query.order_by(MediaFile.created_at.desc(), MediaFile.id).all()
        if not search:
            return files
        needle = search.casefold()
        return [
            f for f in files
            if needle in f.name.casefold() or needle in (f.original_name or "").casefold()
        ]

    def list_in_folders(self, folder_ids: List[str]) -> List[MediaFile]:
        if not folder_ids:
            return []
        return self.db.query(MediaFile).filter(MediaFile.folder_id.in_(folder_ids)).all()

    def totals(self) -> Tuple[int, int]:
        """``(file_count, byte_total)`` over the whole library."""
        count, size = self.db.query(func.count(MediaFile.id), func.sum(MediaFile.size)).one()
        return count or 0, size or 0

    def count_by_type(self) -> Dict[str, int]:
        rows = self.db.query(MediaFile.type, func.count(MediaFile.id)).group_by(MediaFile.type).all()
        return {file_type: count for file_type, count in rows}

    def delete(self, media_file: MediaFile) -> None:
        self.db.delete(media_file)
