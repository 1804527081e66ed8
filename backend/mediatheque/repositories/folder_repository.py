"""Repository for media folder database operations."""

from typing import Dict, List, Optional

from sqlalchemy import func

from ..models import MediaFolder, MediaFile
from ..exceptions import FolderNotFoundError
from .base import BaseRepository


class FolderRepository(BaseRepository[MediaFolder]):
    """Data access layer for media folders. Never commits; the service does."""

    model_class = MediaFolder
    id_prefix = "fld"
    not_found_error = FolderNotFoundError

    def create(self, name: str, parent_id: Optional[str], created_by: str) -> MediaFolder:
        folder = MediaFolder(
            id=self.new_id(),
            name=name,
            parent_id=parent_id,
            created_by=created_by,
        )
        self.db.add(folder)
        self.db.flush()
        return folder

    def get_all(self) -> List[MediaFolder]:
        return self.db.query(MediaFolder).order_by(MediaFolder.name, MediaFolder.id).all()

    def get_children(self, parent_id: Optional[str]) -> List[MediaFolder]:
        """Direct children of *parent_id*; ``None`` lists the root level."""
        query = self.db.query(MediaFolder)
        if parent_id is None:
            query = query.filter(MediaFolder.parent_id.is_(None))
        else:
            query = query.filter(MediaFolder.parent_id == parent_id)
        return query.order_by(MediaFolder.name, MediaFolder.id).all()

    def find_sibling_by_name(
        self, name: str, parent_id: Optional[str], exclude_id: Optional[str] = None
    ) -> Optional[MediaFolder]:
        """Case-insensitive name lookup among the children of *parent_id*."""
        query = self.db.query(MediaFolder).filter(func.lower(MediaFolder.name) == name.lower())
        if parent_id is None:
            query = query.filter(MediaFolder.parent_id.is_(None))
        else:
            query = query.filter(MediaFolder.parent_id == parent_id)
        if exclude_id:
            query = query.filter(MediaFolder.id != exclude_id)
        return query.first()

    def count_files_by_folder(self) -> Dict[Optional[str], int]:
        """Map folder id to the number of files directly inside it."""
        rows = (
            self.db.query(MediaFile.folder_id, func.count(MediaFile.id))
            .group_by(MediaFile.folder_id)
            .all()
        )
        return {folder_id: count for folder_id, count in rows}

    def delete(self, folder: MediaFolder) -> None:
        self.db.delete(folder)
