"""MediaLibrary: the four components behind one operation boundary.

Every public operation reports its outcome through the Notifier and never
raises a MediaLibraryError. Destructive operations ask ``confirm`` first.
Listings are loaded under a generation token so a slow response for a
folder the user already left is dropped instead of overwriting the view.
"""

import asyncio
import inspect
import logging
from typing import Awaitable, Callable, Optional, TypeVar, Union

from .errors import MediaLibraryError, NotFoundError
from .file_registry import FileRegistry
from .folder_tree import FolderTreeStore
from .formatters import format_count
from .gateway import MediaGateway
from .models import ROOT, FileFilters, FileType, Folder, MediaFile, MediaStats, UploadBlob, normalize_folder_id
from .notifications import Level, Notification, Notifier
from .selection import BulkResult, SelectionManager
from .upload import DEFAULT_UPLOAD_TIMEOUT, ProgressCallback, UploadCoordinator

logger = logging.getLogger(__name__)

T = TypeVar("T")
Confirm = Callable[[str], Union[bool, Awaitable[bool]]]


async def _confirmed(confirm: Confirm, message: str) -> bool:
    answer = confirm(message)
    if inspect.isawaitable(answer):
        answer = await answer
    return bool(answer)


class MediaLibrary:
    """Media page state: current folder, filters, listings, selection and uploads."""

    def __init__(
        self,
        api: MediaGateway,
        notifier: Notifier,
        upload_timeout: Optional[float] = None,
        on_progress: Optional[ProgressCallback] = None,
    ):
        self.api = api
        self.notifier = notifier
        self.folders = FolderTreeStore(api)
        self.files = FileRegistry(api)
        self.uploads = UploadCoordinator(
            api,
            self.files,
            on_progress=on_progress,
            timeout=upload_timeout or getattr(api, "upload_timeout", DEFAULT_UPLOAD_TIMEOUT),
        )
        self.selection = SelectionManager(self.files)
        self.current_folder_id: Optional[str] = None
        self.filters = FileFilters()
        self.stats: Optional[MediaStats] = None
        self._generation = 0

    # ------------------------------------------------------------------
    # Navigation and views
    # ------------------------------------------------------------------

    @property
    def current_folder(self) -> Folder:
        return self.folders.get(self.current_folder_id) or ROOT

    async def navigate(self, folder_id: Optional[str]) -> bool:
        """Open *folder_id* ("root" or ``None`` for top level). Clears the selection."""
        self.current_folder_id = normalize_folder_id(folder_id)
        self.selection.clear()
        return await self.refresh()

    async def refresh(self) -> bool:
        """Reload folders and the current listing. False if failed or superseded."""
        self._generation += 1
        generation = self._generation
        folder_id = self.current_folder_id

        try:
            folders, files = await asyncio.gather(self.folders.fetch(), self.files.fetch(folder_id))
        except MediaLibraryError as exc:
            if generation != self._generation:
                logger.debug("Dropped stale failure for folder %s", folder_id)
                return False
            if isinstance(exc, NotFoundError) and folder_id is not None:
                self._notify(Level.WARNING, "Folder not found", "It may have been deleted. Back to the root folder.")
                self.current_folder_id = None
                self.selection.clear()
                return await self.refresh()
            self._notify(Level.ERROR, "Loading failed", exc.message)
            return False

        if generation != self._generation:
            logger.debug("Dropped stale listing for folder %s", folder_id)
            return False

        self.folders.replace(folders)
        self.files.replace(folder_id, files)
        return True

    async def load_stats(self) -> Optional[MediaStats]:
        stats = await self._guarded("Could not load statistics", self.api.get_stats())
        if stats is not None:
            self.stats = stats
        return stats

    def breadcrumbs(self) -> list[Folder]:
        return self.folders.breadcrumb_path(self.current_folder_id)

    def subfolders(self) -> list[Folder]:
        return self.folders.list_children(self.current_folder_id)

    def visible_files(self) -> list[MediaFile]:
        return self.files.list(self.current_folder_id, search=self.filters.search, type=self.filters.type)

    def set_filters(self, search: Optional[str] = None, type: Optional[FileType] = None) -> None:
        self.filters = FileFilters(search=search or None, type=FileType(type) if type else None)

    # ------------------------------------------------------------------
    # Folders
    # ------------------------------------------------------------------

    async def create_folder(self, name: str) -> Optional[Folder]:
        """Create a folder inside the current folder."""
        folder = await self._guarded(
            "Could not create folder", self.folders.create(name, self.current_folder_id),
        )
        if folder is not None:
            self._notify(Level.SUCCESS, "Folder created", f"Folder '{folder.name}' was created")
        return folder

    async def rename_folder(self, folder_id: str, name: str) -> Optional[Folder]:
        folder = await self._guarded("Could not rename folder", self.folders.rename(folder_id, name))
        if folder is not None:
            self._notify(Level.SUCCESS, "Folder renamed", f"Folder renamed to '{folder.name}'")
        return folder

    async def move_folder(self, folder_id: str, parent_id: Optional[str]) -> Optional[Folder]:
        folder = await self._guarded("Could not move folder", self.folders.move(folder_id, parent_id))
        if folder is not None:
            self._notify(Level.SUCCESS, "Folder moved", f"Folder '{folder.name}' was moved")
        return folder

    async def delete_folder(self, folder_id: str, confirm: Confirm) -> bool:
        """Delete a folder with its sub-folders and files, after confirmation."""
        folder = self.folders.get(folder_id)
        name = folder.name if folder is not None else folder_id
        if not await _confirmed(confirm, f"Delete folder '{name}' and everything in it?"):
            return False

        removed = await self._guarded("Could not delete folder", self.folders.delete(folder_id))
        if removed is None:
            return False

        if self.current_folder_id in removed:
            self.current_folder_id = None
            self.selection.clear()
        self._notify(Level.SUCCESS, "Folder deleted", f"Folder '{name}' was deleted")
        await self.refresh()
        return True

    # ------------------------------------------------------------------
    # Files
    # ------------------------------------------------------------------

    async def upload(self, blobs: list[UploadBlob]) -> Optional[list[MediaFile]]:
        """Upload a batch into the current folder."""
        files = await self._guarded("Upload failed", self.uploads.upload(blobs, self.current_folder_id))
        if files is not None:
            self._notify(Level.SUCCESS, "Upload complete", f"{format_count(len(files), 'file')} uploaded")
        return files

    async def update_file(
        self,
        file_id: str,
        name: Optional[str] = None,
        alt_text: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Optional[MediaFile]:
        updated = await self._guarded(
            "Could not update file",
            self.files.update_metadata(file_id, name=name, alt_text=alt_text, description=description),
        )
        if updated is not None:
            self._notify(Level.SUCCESS, "File updated", f"File '{updated.name}' was updated")
        return updated

    async def move_file(self, file_id: str, folder_id: Optional[str]) -> Optional[MediaFile]:
        moved = await self._guarded("Could not move file", self.files.move(file_id, folder_id))
        if moved is not None:
            if self.selection.is_selected(file_id) and self.files.get(file_id) is None:
                self.selection.toggle(file_id)
            self._notify(Level.SUCCESS, "File moved", f"File '{moved.name}' was moved")
        return moved

    async def delete_file(self, file_id: str, confirm: Confirm) -> bool:
        media_file = self.files.get(file_id)
        name = media_file.name if media_file is not None else file_id
        if not await _confirmed(confirm, f"Delete file '{name}'?"):
            return False

        if self.selection.is_selected(file_id):
            self.selection.toggle(file_id)
        done = await self._guarded("Could not delete file", self._delete_one(file_id))
        if not done:
            return False
        self._notify(Level.SUCCESS, "File deleted", f"File '{name}' was deleted")
        return True

    async def delete_selected(self, confirm: Confirm) -> Optional[BulkResult]:
        """Delete every selected file, best-effort. None when nothing was attempted."""
        count = len(self.selection)
        if count == 0:
            self._notify(Level.INFO, "Nothing selected", "Select files to delete first")
            return None
        if not await _confirmed(confirm, f"Delete {format_count(count, 'file')}?"):
            return None

        result = await self.selection.delete_selected()
        if result.succeeded:
            self._notify(Level.SUCCESS, "Files deleted", f"{format_count(len(result.succeeded), 'file')} deleted")
        if result.failed:
            details = "; ".join(f"{fid}: {msg}" for fid, msg in result.errors.items())
            self._notify(
                Level.ERROR,
                f"{format_count(len(result.failed), 'file')} could not be deleted",
                details,
            )
            await self.refresh()
        return result

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _delete_one(self, file_id: str) -> bool:
        await self.files.delete(file_id)
        return True

    async def _guarded(self, title: str, action: Awaitable[T]) -> Optional[T]:
        """Await *action*; turn a MediaLibraryError into an error notification."""
        try:
            return await action
        except NotFoundError as exc:
            self._notify(Level.ERROR, title, exc.message)
            await self.refresh()
        except MediaLibraryError as exc:
            self._notify(Level.ERROR, title, exc.message)
        return None

    def _notify(self, level: Level, title: str, message: str = "") -> None:
        self.notifier.notify(Notification(level, title, message))
