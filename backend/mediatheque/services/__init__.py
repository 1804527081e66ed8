"""Business logic services."""

from .folder_service import FolderService
from .media_service import MediaService, classify_mime_type
from .upload_service import IncomingFile, UploadService

__all__ = ["FolderService", "MediaService", "classify_mime_type", "IncomingFile", "UploadService"]
