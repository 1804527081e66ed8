"""Client-side records and the response envelopes they arrive in.

Responses are validated against these models; a body that does not match
is reported as a NetworkError by the API client.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

ROOT_ID = "root"


def normalize_folder_id(folder_id: Optional[str]) -> Optional[str]:
    """Map the root sentinel and empty strings to ``None``."""
    if folder_id is None:
        return None
    folder_id = folder_id.strip()
    if not folder_id or folder_id == ROOT_ID:
        return None
    return folder_id


class FileType(str, Enum):
    IMAGE = "image"
    VIDEO = "video"
    DOCUMENT = "document"
    OTHER = "other"


class Folder(BaseModel):
    """A folder as listed by the server. ``parent_id`` None means root."""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    parent_id: Optional[str] = None
    files_count: int = Field(default=0, ge=0)
    created_at: Optional[datetime] = None
    created_by: Optional[str] = None


# Synthetic head of every breadcrumb path; never sent to the server.
ROOT = Folder(id=ROOT_ID, name="Root")


class MediaFile(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    original_name: str
    type: FileType
    mime_type: str
    size: int = Field(ge=0)
    url: str
    thumbnail_url: Optional[str] = None
    folder_id: Optional[str] = None
    alt_text: Optional[str] = None
    description: Optional[str] = None
    uploaded_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class FilesByType(BaseModel):
    image: int = 0
    video: int = 0
    document: int = 0
    other: int = 0


class MediaStats(BaseModel):
    total_files: int = Field(ge=0)
    total_size: int = Field(ge=0)
    files_by_type: FilesByType


class FolderDeleteResult(BaseModel):
    message: str
    deleted_folders: int
    deleted_files: int


# Response envelopes
class FolderList(BaseModel):
    folders: list[Folder]


class FileList(BaseModel):
    files: list[MediaFile]


class ErrorBody(BaseModel):
    error: Optional[str] = None
    message: Optional[str] = None


@dataclass(frozen=True)
class UploadBlob:
    """One local file queued for upload."""
    filename: str
    content: bytes
    mime_type: str = "application/octet-stream"

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass(frozen=True)
class FileFilters:
    """Listing filters. ``None`` means no constraint."""
    search: Optional[str] = None
    type: Optional[FileType] = None
