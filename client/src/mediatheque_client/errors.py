"""Error taxonomy of the media library client.

Every failure a caller can see is a MediaLibraryError. MediaLibrary turns
them into notifications at its operation boundary.
"""

from typing import Optional


class MediaLibraryError(Exception):
    """Base error. ``status_code`` is 0 when no HTTP response was received."""

    def __init__(self, message: str, status_code: int = 0, error_code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error_code = error_code


class ValidationError(MediaLibraryError):
    """Input rejected locally or by the server (HTTP 400/422)."""


class NotFoundError(MediaLibraryError):
    """The folder or file no longer exists (HTTP 404)."""


class UploadError(MediaLibraryError):
    """An upload batch failed; nothing from the batch was stored."""


class UploadInProgressError(UploadError):
    """A second upload was started while one is still outstanding."""

    def __init__(self, message: str = "An upload is already in progress"):
        super().__init__(message)


class NetworkError(MediaLibraryError):
    """Transport failure, timeout, server error or unexpected response body."""
