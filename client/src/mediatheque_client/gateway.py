"""The coroutine surface the components need from the server.

``MediaAPIClient`` implements it over HTTP; tests pass in-memory fakes.
"""

from typing import Any, Optional, Protocol, Sequence

from .models import FileType, Folder, FolderDeleteResult, MediaFile, MediaStats, UploadBlob


class MediaGateway(Protocol):
    async def list_folders(self, parent_id: Optional[str] = None) -> list[Folder]: ...

    async def create_folder(self, name: str, parent_id: Optional[str] = None) -> Folder: ...

    async def update_folder(self, folder_id: str, name: Optional[str] = None, parent_id: Any = ...) -> Folder: ...

    async def delete_folder(self, folder_id: str) -> FolderDeleteResult: ...

    async def list_files(
        self,
        folder_id: Optional[str] = None,
        search: Optional[str] = None,
        file_type: Optional[FileType] = None,
    ) -> list[MediaFile]: ...

    async def upload(self, blobs: Sequence[UploadBlob], folder_id: Optional[str] = None) -> list[MediaFile]: ...

    async def update_file(
        self,
        file_id: str,
        name: Optional[str] = None,
        alt_text: Optional[str] = None,
        description: Optional[str] = None,
    ) -> MediaFile: ...

    async def move_file(self, file_id: str, folder_id: Optional[str]) -> MediaFile: ...

    async def delete_file(self, file_id: str) -> None: ...

    async def get_stats(self) -> MediaStats: ...
