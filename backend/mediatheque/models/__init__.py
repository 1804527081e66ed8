"""Database models."""

from .folder import MediaFolder
from .media_file import MediaFile

__all__ = ["MediaFolder", "MediaFile"]
