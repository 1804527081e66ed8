"""Pydantic schemas for API validation."""

from .folder import (
    ROOT_SENTINEL,
    FolderCreate,
    FolderUpdate,
    FolderResponse,
    FolderListResponse,
    BreadcrumbResponse,
    FolderDeleteResponse,
)
from .media import (
    FileType,
    MediaFileResponse,
    MediaFileListResponse,
    MediaFileUpdate,
    MediaFileMove,
    UploadResponse,
    FilesByType,
    MediaStatsResponse,
    MessageResponse,
)

__all__ = [
    "ROOT_SENTINEL",
    "FolderCreate",
    "FolderUpdate",
    "FolderResponse",
    "FolderListResponse",
    "BreadcrumbResponse",
    "FolderDeleteResponse",
    "FileType",
    "MediaFileResponse",
    "MediaFileListResponse",
    "MediaFileUpdate",
    "MediaFileMove",
    "UploadResponse",
    "FilesByType",
    "MediaStatsResponse",
    "MessageResponse",
]
