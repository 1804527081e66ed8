"""Exception hierarchy for the media API."""

from enum import Enum
from typing import Optional, Dict, Any, List


class ErrorCode(str, Enum):
    """Standardized error codes for API responses."""

    # Folder errors
    FOLDER_NOT_FOUND = "FOLDER_NOT_FOUND"
    FOLDER_CYCLE = "FOLDER_CYCLE"
    DUPLICATE_FOLDER = "DUPLICATE_FOLDER"

    # File errors
    FILE_NOT_FOUND = "FILE_NOT_FOUND"
    UPLOAD_REJECTED = "UPLOAD_REJECTED"

    # Validation errors
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Storage / database errors
    STORAGE_ERROR = "STORAGE_ERROR"
    DATABASE_ERROR = "DATABASE_ERROR"

    # Auth
    UNAUTHORIZED = "UNAUTHORIZED"

    # Generic errors
    INTERNAL_ERROR = "INTERNAL_ERROR"


class MediaException(Exception):
    """
    Base exception for all media API errors.

    Carries a human-readable message, a machine-readable error code,
    the HTTP status to answer with, and optional details.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Body of the JSON error response."""
        return {
            "error": self.error_code.value,
            "message": self.message,
            "details": self.details
        }


class FolderNotFoundError(MediaException):
    """Folder not found in database."""

    def __init__(self, folder_id: str):
        super().__init__(
            f"Folder not found: {folder_id}",
            ErrorCode.FOLDER_NOT_FOUND,
            status_code=404,
            details={"folder_id": folder_id}
        )


class MediaFileNotFoundError(MediaException):
    """Media file not found in database."""

    def __init__(self, file_id: str):
        super().__init__(
            f"File not found: {file_id}",
            ErrorCode.FILE_NOT_FOUND,
            status_code=404,
            details={"file_id": file_id}
        )


class ValidationError(MediaException):
    """Validation failed for user input."""

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(
            message,
            ErrorCode.VALIDATION_ERROR,
            status_code=400,
            details=details
        )


class FolderCycleError(MediaException):
    """Assigning this parent would make a folder its own ancestor."""

    def __init__(self, folder_id: str, parent_id: str):
        super().__init__(
            f"Cannot move folder {folder_id} into its own descendant {parent_id}",
            ErrorCode.FOLDER_CYCLE,
            status_code=400,
            details={"folder_id": folder_id, "parent_id": parent_id}
        )


class DuplicateFolderError(MediaException):
    """A sibling folder already uses this name."""

    def __init__(self, name: str, parent_id: Optional[str]):
        super().__init__(
            f"A folder named '{name}' already exists here",
            ErrorCode.DUPLICATE_FOLDER,
            status_code=409,
            details={"name": name, "parent_id": parent_id}
        )


class UploadRejectedError(MediaException):
    """The whole upload batch was refused; nothing was stored."""

    def __init__(self, message: str, rejected: Optional[List[Dict[str, str]]] = None):
        super().__init__(
            message,
            ErrorCode.UPLOAD_REJECTED,
            status_code=400,
            details={"rejected": rejected or []}
        )


class AuthenticationError(MediaException):
    """Request lacks valid authentication credentials."""

    def __init__(self, message: str = "Invalid or missing authentication token"):
        super().__init__(
            message,
            ErrorCode.UNAUTHORIZED,
            status_code=401,
        )


class StorageError(MediaException):
    """Writing or removing a stored blob failed."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        details = {}
        if original_error:
            details["original_error"] = str(original_error)

        super().__init__(
            message,
            ErrorCode.STORAGE_ERROR,
            status_code=500,
            details=details
        )


class DatabaseError(MediaException):
    """Database operation failed."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        details = {}
        if original_error:
            details["original_error"] = str(original_error)

        super().__init__(
            message,
            ErrorCode.DATABASE_ERROR,
            status_code=500,
            details=details
        )
