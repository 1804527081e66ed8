"""Deep module for folder operations: listing, create, rename/move, cascading
delete and breadcrumb reconstruction.

Callers never walk the parent graph themselves. Every parent assignment goes
through the ancestor check, so the folder graph stays acyclic.
"""

import logging
from collections import deque
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from ..exceptions import (
    DuplicateFolderError,
    FolderCycleError,
    StorageError,
    ValidationError,
)
from ..models import MediaFolder
from ..repositories import FolderRepository, MediaFileRepository
from ..schemas.folder import (
    FolderCreate,
    FolderDeleteResponse,
    FolderResponse,
    FolderUpdate,
)
from ..storage import LocalStorage

MAX_FOLDER_NAME_LENGTH = 255

logger = logging.getLogger(__name__)


class FolderService:
    """All folder operations behind a narrow interface.

    Public methods:
        list_folders     -- every folder with its direct file count
        list_children    -- direct children of a folder (None = root)
        get_folder       -- lookup by id, raises FolderNotFoundError
        create_folder    -- validated create under an existing parent
        update_folder    -- rename and/or move with cycle protection
        delete_folder    -- remove folder, sub-folders, files and blobs
        breadcrumb_path  -- ancestor chain, root-first
    """

    def __init__(self, db: Session, storage: Optional[LocalStorage] = None):
        self.db = db
        self.folder_repo = FolderRepository(db)
        self.file_repo = MediaFileRepository(db)
        self.storage = storage or LocalStorage()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_folders(self) -> List[FolderResponse]:
        counts = self.folder_repo.count_files_by_folder()
        return [self.to_response(f, counts) for f in self.folder_repo.get_all()]

    def list_children(self, parent_id: Optional[str]) -> List[FolderResponse]:
        counts = self.folder_repo.count_files_by_folder()
        return [self.to_response(f, counts) for f in self.folder_repo.get_children(parent_id)]

    def get_folder(self, folder_id: str) -> MediaFolder:
        return self.folder_repo.get_by_id(folder_id)

    def breadcrumb_path(self, folder_id: str) -> List[MediaFolder]:
        """Ancestors of *folder_id*, root-first, ending with the folder itself.

        Each hop is a dict lookup. A dangling parent reference or a cycle
        ends the walk early and the partial path is returned.
        """
        folder = self.folder_repo.get_by_id(folder_id)
        index = {f.id: f for f in self.folder_repo.get_all()}

        path = [folder]
        seen = {folder.id}
        current = folder
        while current.parent_id is not None:
            parent = index.get(current.parent_id)
            if parent is None or parent.id in seen:
                logger.warning(
                    "Broken folder chain",
                    extra={"folder_id": folder_id, "at": current.id, "parent_id": current.parent_id},
                )
                break
            path.append(parent)
            seen.add(parent.id)
            current = parent

        path.reverse()
        return path

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create_folder(self, data: FolderCreate, created_by: str) -> MediaFolder:
        name = self._clean_name(data.name)
        if data.parent_id is not None:
            self.folder_repo.get_by_id(data.parent_id)
        if self.folder_repo.find_sibling_by_name(name, data.parent_id):
            raise DuplicateFolderError(name, data.parent_id)

        folder = self.folder_repo.create(name, data.parent_id, created_by)
        self.db.commit()
        self.db.refresh(folder)
        logger.info("Folder created", extra={"folder_id": folder.id, "parent_id": folder.parent_id})
        return folder

    def update_folder(self, folder_id: str, data: FolderUpdate) -> MediaFolder:
        """Rename and/or move. ``parent_id`` applies only when sent explicitly."""
        folder = self.folder_repo.get_by_id(folder_id)

        name = folder.name if data.name is None else self._clean_name(data.name)
        parent_id = folder.parent_id
        if "parent_id" in data.model_fields_set:
            parent_id = data.parent_id
            if parent_id is not None:
                self.folder_repo.get_by_id(parent_id)
                if self.is_descendant(folder_id, parent_id):
                    raise FolderCycleError(folder_id, parent_id)

        if (name, parent_id) != (folder.name, folder.parent_id):
            if self.folder_repo.find_sibling_by_name(name, parent_id, exclude_id=folder_id):
                raise DuplicateFolderError(name, parent_id)

        folder.name = name
        folder.parent_id = parent_id
        self.db.commit()
        self.db.refresh(folder)
        return folder

    def delete_folder(self, folder_id: str) -> FolderDeleteResponse:
        """Delete a folder with all its sub-folders and files.

        Rows go in one transaction; blobs are removed after the commit so a
        failed commit never loses stored bytes.
        """
        folder = self.folder_repo.get_by_id(folder_id)
        folder_name = folder.name
        subtree = self._collect_subtree(folder)

        files = self.file_repo.list_in_folders([f.id for f in subtree])
        storage_keys = [f.storage_key for f in files]
        for media_file in files:
            self.file_repo.delete(media_file)
        self.db.flush()

        # Children before parents
        for node in reversed(subtree):
            self.folder_repo.delete(node)
            self.db.flush()

        self.db.commit()

        for key in storage_keys:
            try:
                self.storage.delete(key)
            except StorageError as e:
                logger.warning("Blob left behind after folder delete", extra={"key": key, "error": e.message})

        logger.info(
            "Folder deleted",
            extra={"folder_id": folder_id, "folders": len(subtree), "files": len(files)},
        )
        return FolderDeleteResponse(
            message=f"Folder '{folder_name}' deleted",
            deleted_folders=len(subtree),
            deleted_files=len(files),
        )

    def is_descendant(self, ancestor_id: str, candidate_id: str) -> bool:
        """True if *candidate_id* is *ancestor_id* or lies below it."""
        parents = {f.id: f.parent_id for f in self.folder_repo.get_all()}
        current: Optional[str] = candidate_id
        seen = set()
        while current is not None and current not in seen:
            if current == ancestor_id:
                return True
            seen.add(current)
            current = parents.get(current)
        return False

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def to_response(folder: MediaFolder, counts: Dict[Optional[str], int]) -> FolderResponse:
        return FolderResponse(
            id=folder.id,
            name=folder.name,
            parent_id=folder.parent_id,
            files_count=counts.get(folder.id, 0),
            created_by=folder.created_by,
            created_at=folder.created_at,
            updated_at=folder.updated_at,
        )

    @staticmethod
    def _clean_name(name: Optional[str]) -> str:
        name = (name or "").strip()
        if not name:
            raise ValidationError("Folder name cannot be empty", field="name")
        if len(name) > MAX_FOLDER_NAME_LENGTH:
            raise ValidationError(
                f"Folder name cannot exceed {MAX_FOLDER_NAME_LENGTH} characters", field="name"
            )
        if "/" in name:
            raise ValidationError("Folder name cannot contain '/'", field="name")
        return name

    def _collect_subtree(self, root: MediaFolder) -> List[MediaFolder]:
        """*root* and all its descendants, breadth-first (parents before children)."""
        children: Dict[str, List[MediaFolder]] = {}
        for f in self.folder_repo.get_all():
            if f.parent_id is not None:
                children.setdefault(f.parent_id, []).append(f)

        ordered: List[MediaFolder] = []
        seen = set()
        queue = deque([root])
        while queue:
            node = queue.popleft()
            if node.id in seen:
                continue
            seen.add(node.id)
            ordered.append(node)
            queue.extend(children.get(node.id, []))
        return ordered
