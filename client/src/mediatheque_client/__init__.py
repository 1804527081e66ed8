"""Media library component for the admin panel.

Folder navigation, batch upload with progress, file metadata and bulk
deletion on top of the Médiathèque REST API.
"""

from .api_client import MediaAPIClient
from .errors import (
    MediaLibraryError,
    NetworkError,
    NotFoundError,
    UploadError,
    UploadInProgressError,
    ValidationError,
)
from .file_registry import FileRegistry
from .folder_tree import FolderTreeStore
from .formatters import format_file_size
from .library import MediaLibrary
from .models import ROOT, ROOT_ID, FileFilters, FileType, Folder, MediaFile, MediaStats, UploadBlob
from .notifications import Level, Notification, NotificationCenter, Notifier
from .selection import BulkResult, SelectionManager
from .upload import UploadCoordinator

__all__ = [
    "MediaAPIClient",
    "MediaLibrary",
    "FolderTreeStore",
    "FileRegistry",
    "UploadCoordinator",
    "SelectionManager",
    "BulkResult",
    "Folder",
    "MediaFile",
    "MediaStats",
    "FileType",
    "FileFilters",
    "UploadBlob",
    "ROOT",
    "ROOT_ID",
    "Notification",
    "NotificationCenter",
    "Notifier",
    "Level",
    "MediaLibraryError",
    "ValidationError",
    "NotFoundError",
    "UploadError",
    "UploadInProgressError",
    "NetworkError",
    "format_file_size",
]
