"""Folder Tree Store: the loaded folder hierarchy and every walk over it.

Folders are held in an id-indexed dict, so breadcrumb and ancestor walks
cost one lookup per level. Walks stop at a dangling parent reference or a
cycle and return what they have.
"""

import logging
from typing import Optional

from .errors import NotFoundError, ValidationError
from .gateway import MediaGateway
from .models import ROOT, Folder, normalize_folder_id

logger = logging.getLogger(__name__)

MAX_FOLDER_NAME_LENGTH = 255


class FolderTreeStore:
    """Client-side view of all folders.

    Public methods:
        fetch / replace / refresh -- load the full folder list
        list_children             -- direct children of a folder or root
        breadcrumb_path           -- ROOT first, ending with the folder
        descendants               -- every folder below a folder
        assign_parent             -- ancestor guard for moves
        create / rename / move / delete
    """

    def __init__(self, api: MediaGateway):
        self.api = api
        self._folders: dict[str, Folder] = {}

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def fetch(self) -> list[Folder]:
        return await self.api.list_folders()

    def replace(self, folders: list[Folder]) -> None:
        self._folders = {f.id: f for f in folders}

    async def refresh(self) -> list[Folder]:
        folders = await self.fetch()
        self.replace(folders)
        return folders

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def all(self) -> list[Folder]:
        return list(self._folders.values())

    def get(self, folder_id: Optional[str]) -> Optional[Folder]:
        folder_id = normalize_folder_id(folder_id)
        if folder_id is None:
            return ROOT
        return self._folders.get(folder_id)

    def __contains__(self, folder_id: str) -> bool:
        return folder_id in self._folders

    def list_children(self, parent_id: Optional[str]) -> list[Folder]:
        """Folders whose parent is *parent_id* (``None`` or "root" for top level), by name."""
        parent_id = normalize_folder_id(parent_id)
        children = [f for f in self._folders.values() if f.parent_id == parent_id]
        return sorted(children, key=lambda f: (f.name.lower(), f.id))

    def breadcrumb_path(self, folder_id: Optional[str]) -> list[Folder]:
        """``[ROOT, ..., grandparent, parent, folder]``.

        An unknown folder yields ``[ROOT]``. A dangling parent or a cycle
        ends the walk with the partial path gathered so far.
        """
        folder_id = normalize_folder_id(folder_id)
        folder = self._folders.get(folder_id) if folder_id else None
        if folder is None:
            if folder_id is not None:
                logger.warning("Breadcrumb for unknown folder %s", folder_id)
            return [ROOT]

        path = [folder]
        seen = {folder.id}
        while path[-1].parent_id is not None:
            parent = self._folders.get(path[-1].parent_id)
            if parent is None or parent.id in seen:
                logger.warning(
                    "Broken folder chain at %s (parent %s)", path[-1].id, path[-1].parent_id,
                )
                break
            path.append(parent)
            seen.add(parent.id)

        path.append(ROOT)
        path.reverse()
        return path

    def descendants(self, folder_id: str) -> set[str]:
        """Ids of every folder below *folder_id*, not including it."""
        children: dict[str, list[str]] = {}
        for f in self._folders.values():
            if f.parent_id is not None:
                children.setdefault(f.parent_id, []).append(f.id)

        found: set[str] = set()
        stack = list(children.get(folder_id, []))
        while stack:
            current = stack.pop()
            if current in found or current == folder_id:
                continue
            found.add(current)
            stack.extend(children.get(current, []))
        return found

    def assign_parent(self, folder_id: str, parent_id: Optional[str]) -> Optional[str]:
        """Check that *parent_id* may become the parent of *folder_id*.

        Returns the normalized parent id. Raises ValidationError when the
        parent is the folder itself or one of its descendants.
        """
        parent_id = normalize_folder_id(parent_id)
        if folder_id not in self._folders:
            raise NotFoundError(f"Folder not found: {folder_id}", status_code=404)
        if parent_id is None:
            return None
        if parent_id == folder_id or parent_id in self.descendants(folder_id):
            raise ValidationError("A folder cannot be moved into itself or one of its sub-folders")
        return parent_id

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def create(self, name: str, parent_id: Optional[str] = None) -> Folder:
        name = self._clean_name(name)
        folder = await self.api.create_folder(name, normalize_folder_id(parent_id))
        self._folders[folder.id] = folder
        return folder

    async def rename(self, folder_id: str, name: str) -> Folder:
        name = self._clean_name(name)
        try:
            folder = await self.api.update_folder(folder_id, name=name)
        except NotFoundError:
            self._forget(folder_id)
            raise
        self._folders[folder.id] = folder
        return folder

    async def move(self, folder_id: str, parent_id: Optional[str]) -> Folder:
        parent_id = self.assign_parent(folder_id, parent_id)
        try:
            folder = await self.api.update_folder(folder_id, parent_id=parent_id)
        except NotFoundError:
            self._forget(folder_id)
            raise
        self._folders[folder.id] = folder
        return folder

    async def delete(self, folder_id: str) -> set[str]:
        """Delete a folder on the server; returns the ids removed locally."""
        folder_id = normalize_folder_id(folder_id)
        if folder_id is None:
            raise ValidationError("The root folder cannot be deleted")
        try:
            await self.api.delete_folder(folder_id)
        except NotFoundError:
            self._forget(folder_id)
            raise
        return self._forget(folder_id)

    def _forget(self, folder_id: str) -> set[str]:
        removed = self.descendants(folder_id) | {folder_id}
        for fid in removed:
            self._folders.pop(fid, None)
        return removed

    @staticmethod
    def _clean_name(name: Optional[str]) -> str:
        name = (name or "").strip()
        if not name:
            raise ValidationError("Folder name cannot be empty")
        if len(name) > MAX_FOLDER_NAME_LENGTH:
            raise ValidationError(f"Folder name cannot exceed {MAX_FOLDER_NAME_LENGTH} characters")
        return name
