"""File Registry: the listing of the current folder and edits to it."""

import logging
from typing import Iterable, Optional

from .errors import NotFoundError, ValidationError
from .gateway import MediaGateway
from .models import FilesByType, FileType, MediaFile, MediaStats, normalize_folder_id

logger = logging.getLogger(__name__)

MAX_FILE_NAME_LENGTH = 255


class FileRegistry:
    """Files of one folder as last loaded from the server, newest first.

    Filtering is a pure function of the loaded listing; only loading and
    mutations talk to the server.
    """

    def __init__(self, api: MediaGateway):
        self.api = api
        self.folder_id: Optional[str] = None
        self._files: dict[str, MediaFile] = {}

    async def fetch(self, folder_id: Optional[str]) -> list[MediaFile]:
        return await self.api.list_files(normalize_folder_id(folder_id))

    def replace(self, folder_id: Optional[str], files: Iterable[MediaFile]) -> None:
        self.folder_id = normalize_folder_id(folder_id)
        self._files = {f.id: f for f in files}

    async def load(self, folder_id: Optional[str]) -> list[MediaFile]:
        files = await self.fetch(folder_id)
        self.replace(folder_id, files)
        return files

    def get(self, file_id: str) -> Optional[MediaFile]:
        return self._files.get(file_id)

    def __len__(self) -> int:
        return len(self._files)

    def all(self) -> list[MediaFile]:
        return list(self._files.values())

    def commit(self, files: Iterable[MediaFile]) -> None:
        """Insert freshly uploaded records that belong to the loaded folder."""
        fresh = {f.id: f for f in files if f.folder_id == self.folder_id}
        # Newest first, matching the server's listing order.
        self._files = {**fresh, **self._files}

    async def update_metadata(
        self,
        file_id: str,
        name: Optional[str] = None,
        alt_text: Optional[str] = None,
        description: Optional[str] = None,
    ) -> MediaFile:
        if name is not None:
            name = name.strip()
            if not name:
                raise ValidationError("File name cannot be empty")
            if len(name) > MAX_FILE_NAME_LENGTH:
                raise ValidationError(f"File name cannot exceed {MAX_FILE_NAME_LENGTH} characters")

        try:
            updated = await self.api.update_file(
                file_id, name=name, alt_text=alt_text, description=description,
            )
        except NotFoundError:
            self._files.pop(file_id, None)
            raise
        if file_id in self._files:
            self._files[file_id] = updated
        return updated

    async def move(self, file_id: str, folder_id: Optional[str]) -> MediaFile:
        try:
            moved = await self.api.move_file(file_id, normalize_folder_id(folder_id))
        except NotFoundError:
            self._files.pop(file_id, None)
            raise
        if moved.folder_id == self.folder_id:
            self._files[file_id] = moved
        else:
            self._files.pop(file_id, None)
        return moved

    async def delete(self, file_id: str) -> None:
        try:
            await self.api.delete_file(file_id)
        except NotFoundError:
            self._files.pop(file_id, None)
            raise
        self._files.pop(file_id, None)

    def compute_stats(self) -> MediaStats:
        """Counts and sizes over the loaded listing."""
        by_type = {t.value: 0 for t in FileType}
        total_size = 0
        for f in self._files.values():
            by_type[f.type.value] += 1
            total_size += f.size
        return MediaStats(
            total_files=len(self._files),
            total_size=total_size,
            files_by_type=FilesByType(**by_type),
        )

    def list(
        self,
        folder_id: Optional[str] = None,
        search: Optional[str] = None,
        type: Optional[FileType] = None,
    ) -> list[MediaFile]:
        """Files in *folder_id* matching *search* (name or original name, any case) and *type*."""
        folder_id = normalize_folder_id(folder_id)
        needle = (search or "").strip().casefold()
        file_type = FileType(type) if type else None
        return [
            f for f in self._files.values()
            if f.folder_id == folder_id
            and (not needle or needle in f.name.casefold() or needle in f.original_name.casefold())
            and (file_type is None or f.type == file_type)
        ]
