"""Media file, upload and stats schemas."""

from enum import Enum
from pydantic import BaseModel, ConfigDict
from datetime import datetime
from typing import Optional, List

from .folder import ParentId


class FileType(str, Enum):
    """Coarse classification derived from the MIME type."""
    IMAGE = "image"
    VIDEO = "video"
    DOCUMENT = "document"
    OTHER = "other"


class MediaFileResponse(BaseModel):
    """Schema for media file response."""
    id: str
    name: str
    original_name: str
    type: FileType
    mime_type: str
    size: int
    url: str
    thumbnail_url: Optional[str] = None
    folder_id: Optional[str] = None
    alt_text: Optional[str] = None
    description: Optional[str] = None
    uploaded_by: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class MediaFileListResponse(BaseModel):
    files: List[MediaFileResponse]


class MediaFileUpdate(BaseModel):
    """Editable metadata. Location and content cannot be changed here."""
    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = None
    alt_text: Optional[str] = None
    description: Optional[str] = None


class MediaFileMove(BaseModel):
    """Target folder for a move; ``None`` or ``"root"`` means root."""
    folder_id: ParentId = None


class UploadResponse(BaseModel):
    """Files created by one committed upload batch."""
    files: List[MediaFileResponse]


class FilesByType(BaseModel):
    image: int = 0
    video: int = 0
    document: int = 0
    other: int = 0


class MediaStatsResponse(BaseModel):
    """Aggregate counts over the whole library."""
    total_files: int
    total_size: int
    files_by_type: FilesByType


class MessageResponse(BaseModel):
    message: str
