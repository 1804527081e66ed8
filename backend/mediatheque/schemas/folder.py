"""Folder schemas."""

from pydantic import AfterValidator, BaseModel
from datetime import datetime
from typing import Annotated, Optional, List

ROOT_SENTINEL = "root"


def normalize_parent_id(v: Optional[str]) -> Optional[str]:
    """Map the root sentinel and empty strings to ``None``."""
    if v is None:
        return None
    v = v.strip()
    if not v or v == ROOT_SENTINEL:
        return None
    return v


ParentId = Annotated[Optional[str], AfterValidator(normalize_parent_id)]


class FolderCreate(BaseModel):
    """Schema for creating a folder. An empty name is rejected by the service."""
    name: str
    parent_id: ParentId = None


class FolderUpdate(BaseModel):
    """Rename and/or move a folder.

    ``parent_id`` is only applied when present in the request body, so
    ``{"parent_id": null}`` moves the folder to root while ``{}`` leaves it.
    """
    name: Optional[str] = None
    parent_id: ParentId = None


class FolderResponse(BaseModel):
    """Schema for folder response."""
    id: str
    name: str
    parent_id: Optional[str] = None
    files_count: int = 0
    created_by: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class FolderListResponse(BaseModel):
    folders: List[FolderResponse]


class BreadcrumbResponse(BaseModel):
    """Ancestor chain of a folder, root-first, ending with the folder itself."""
    path: List[FolderResponse]


class FolderDeleteResponse(BaseModel):
    """Result of a cascading folder delete."""
    message: str
    deleted_folders: int
    deleted_files: int
