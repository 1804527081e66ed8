"""In-memory stand-in for the media server, shared by the client tests."""

import asyncio
from datetime import datetime, timezone
from typing import Optional

from mediatheque_client.errors import NotFoundError, ValidationError
from mediatheque_client.models import (
    FilesByType,
    FileType,
    Folder,
    FolderDeleteResult,
    MediaFile,
    MediaStats,
    UploadBlob,
    normalize_folder_id,
)

_UNSET = object()


class FakeGateway:
    """Implements the gateway coroutines over two dicts and records every call.

    Knobs:
        upload_gate    -- asyncio.Event the upload waits on before answering
        upload_error   -- exception raised by upload
        list_delays    -- seconds list_files sleeps, keyed by folder id
        list_errors    -- exception list_files raises after its delay, keyed by folder id
        missing_on_delete -- file ids whose delete answers 404
    """

    def __init__(self):
        self.folders: dict[str, Folder] = {}
        self.files: dict[str, MediaFile] = {}
        self.calls: list[tuple] = []
        self.upload_gate: Optional[asyncio.Event] = None
        self.upload_error: Optional[Exception] = None
        self.list_delays: dict[Optional[str], float] = {}
        self.list_errors: dict[Optional[str], Exception] = {}
        self.missing_on_delete: set[str] = set()
        self._seq = 0

    # ----- seeding ---------------------------------------------------------

    def _next_id(self, prefix: str) -> str:
        self._seq += 1
        return f"{prefix}-{self._seq:04d}"

    def add_folder(self, name: str, parent_id: Optional[str] = None, folder_id: Optional[str] = None) -> Folder:
        folder = Folder(id=folder_id or self._next_id("fld"), name=name, parent_id=parent_id)
        self.folders[folder.id] = folder
        return folder

    def add_file(
        self,
        name: str,
        file_type: FileType = FileType.IMAGE,
        size: int = 100,
        folder_id: Optional[str] = None,
        original_name: Optional[str] = None,
        mime_type: str = "image/png",
    ) -> MediaFile:
        file_id = self._next_id("med")
        media = MediaFile(
            id=file_id,
            name=name,
            original_name=original_name or name,
            type=file_type,
            mime_type=mime_type,
            size=size,
            url=f"/uploads/{file_id}",
            folder_id=folder_id,
            uploaded_by="tester",
            created_at=datetime.now(timezone.utc),
        )
        self.files[media.id] = media
        return media

    def count(self, name: str) -> int:
        return sum(1 for call in self.calls if call[0] == name)

    # ----- folders ---------------------------------------------------------

    async def list_folders(self, parent_id: Optional[str] = None) -> list[Folder]:
        self.calls.append(("list_folders",))
        counts: dict[str, int] = {}
        for f in self.files.values():
            if f.folder_id:
                counts[f.folder_id] = counts.get(f.folder_id, 0) + 1
        return [f.model_copy(update={"files_count": counts.get(f.id, 0)}) for f in self.folders.values()]

    async def create_folder(self, name: str, parent_id: Optional[str] = None) -> Folder:
        self.calls.append(("create_folder", name, parent_id))
        if parent_id is not None and parent_id not in self.folders:
            raise NotFoundError(f"Folder not found: {parent_id}", status_code=404)
        return self.add_folder(name, parent_id)

    async def update_folder(self, folder_id: str, name: Optional[str] = None, parent_id=_UNSET) -> Folder:
        self.calls.append(("update_folder", folder_id, name, parent_id))
        folder = self._folder(folder_id)
        changes = {}
        if name is not None:
            changes["name"] = name
        if parent_id is not _UNSET:
            changes["parent_id"] = normalize_folder_id(parent_id)
        folder = folder.model_copy(update=changes)
        self.folders[folder_id] = folder
        return folder

    async def delete_folder(self, folder_id: str) -> FolderDeleteResult:
        self.calls.append(("delete_folder", folder_id))
        self._folder(folder_id)
        doomed = {folder_id}
        grew = True
        while grew:
            below = {f.id for f in self.folders.values() if f.parent_id in doomed}
            grew = not below <= doomed
            doomed |= below
        files = [fid for fid, f in self.files.items() if f.folder_id in doomed]
        for fid in files:
            del self.files[fid]
        for fid in doomed:
            del self.folders[fid]
        return FolderDeleteResult(message="deleted", deleted_folders=len(doomed), deleted_files=len(files))

    # ----- files -----------------------------------------------------------

    async def list_files(self, folder_id=None, search=None, file_type=None) -> list[MediaFile]:
        folder_id = normalize_folder_id(folder_id)
        self.calls.append(("list_files", folder_id))
        delay = self.list_delays.get(folder_id)
        if delay:
            await asyncio.sleep(delay)
        if folder_id in self.list_errors:
            raise self.list_errors[folder_id]
        if folder_id is not None:
            self._folder(folder_id)
        return [f for f in self.files.values() if f.folder_id == folder_id]

    async def upload(self, blobs: list[UploadBlob], folder_id: Optional[str] = None) -> list[MediaFile]:
        self.calls.append(("upload", len(blobs), folder_id))
        if self.upload_gate is not None:
            await self.upload_gate.wait()
        if self.upload_error is not None:
            raise self.upload_error
        return [
            self.add_file(b.filename, FileType.IMAGE, b.size, folder_id, mime_type=b.mime_type)
            for b in blobs
        ]

    async def update_file(self, file_id, name=None, alt_text=None, description=None) -> MediaFile:
        self.calls.append(("update_file", file_id))
        media = self._file(file_id)
        changes = {k: v for k, v in (("name", name), ("alt_text", alt_text), ("description", description)) if v is not None}
        if "name" in changes and not changes["name"].strip():
            raise ValidationError("File name cannot be empty", status_code=400)
        media = media.model_copy(update=changes)
        self.files[file_id] = media
        return media

    async def move_file(self, file_id: str, folder_id: Optional[str]) -> MediaFile:
        self.calls.append(("move_file", file_id, folder_id))
        media = self._file(file_id)
        if folder_id is not None:
            self._folder(folder_id)
        media = media.model_copy(update={"folder_id": folder_id})
        self.files[file_id] = media
        return media

    async def delete_file(self, file_id: str) -> None:
        self.calls.append(("delete_file", file_id))
        await asyncio.sleep(0)
        if file_id in self.missing_on_delete:
            raise NotFoundError(f"File not found: {file_id}", status_code=404)
        self._file(file_id)
        del self.files[file_id]

    async def get_stats(self) -> MediaStats:
        self.calls.append(("get_stats",))
        by_type = {t.value: 0 for t in FileType}
        for f in self.files.values():
            by_type[f.type.value] += 1
        return MediaStats(
            total_files=len(self.files),
            total_size=sum(f.size for f in self.files.values()),
            files_by_type=FilesByType(**by_type),
        )

    # ----- helpers ---------------------------------------------------------

    def _folder(self, folder_id: str) -> Folder:
        if folder_id not in self.folders:
            raise NotFoundError(f"Folder not found: {folder_id}", status_code=404)
        return self.folders[folder_id]

    def _file(self, file_id: str) -> MediaFile:
        if file_id not in self.files:
            raise NotFoundError(f"File not found: {file_id}", status_code=404)
        return self.files[file_id]


def blob(name: str = "photo.png", size: int = 100, mime_type: str = "image/png") -> UploadBlob:
    return UploadBlob(filename=name, content=b"\x00" * size, mime_type=mime_type)
