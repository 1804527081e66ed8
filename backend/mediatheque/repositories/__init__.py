"""Data access repositories."""

from .base import BaseRepository
from .folder_repository import FolderRepository
from .file_repository import MediaFileRepository

__all__ = ["BaseRepository", "FolderRepository", "MediaFileRepository"]
