"""Folder API: listing, breadcrumbs, create, rename/move and cascading delete.

Endpoints stay thin; FolderService owns validation and the folder graph.
"""

import logging
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional

from ..core.auth import AuthContext, require_auth
from ..database import get_db
from ..schemas.folder import (
    BreadcrumbResponse,
    FolderCreate,
    FolderDeleteResponse,
    FolderListResponse,
    FolderResponse,
    FolderUpdate,
    normalize_parent_id,
)
from ..services.folder_service import FolderService
from ..storage import LocalStorage, get_storage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/media/folders", tags=["folders"])


@router.get("", response_model=FolderListResponse)
def list_folders(
    parent_id: Optional[str] = Query(None, description="Only direct children of this folder ('root' for top level)"),
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_auth),
):
    """List folders with their direct file counts."""
    service = FolderService(db)
    if parent_id is None:
        return FolderListResponse(folders=service.list_folders())
    return FolderListResponse(folders=service.list_children(normalize_parent_id(parent_id)))


@router.post("", response_model=FolderResponse, status_code=201)
def create_folder(
    data: FolderCreate,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_auth),
):
    service = FolderService(db)
    return service.create_folder(data, created_by=auth.user_id)


@router.get("/{folder_id}", response_model=FolderResponse)
def get_folder(
    folder_id: str,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_auth),
):
    service = FolderService(db)
    folder = service.get_folder(folder_id)
    counts = service.folder_repo.count_files_by_folder()
    return service.to_response(folder, counts)


@router.get("/{folder_id}/breadcrumbs", response_model=BreadcrumbResponse)
def get_breadcrumbs(
    folder_id: str,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_auth),
):
    """Ancestor chain of a folder, root-first."""
    service = FolderService(db)
    path = service.breadcrumb_path(folder_id)
    counts = service.folder_repo.count_files_by_folder()
    return BreadcrumbResponse(path=[service.to_response(f, counts) for f in path])


@router.put("/{folder_id}", response_model=FolderResponse)
def update_folder(
    folder_id: str,
    data: FolderUpdate,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_auth),
):
    """Rename a folder and/or move it under another parent."""
    service = FolderService(db)
    folder = service.update_folder(folder_id, data)
    return service.to_response(folder, service.folder_repo.count_files_by_folder())


@router.delete("/{folder_id}", response_model=FolderDeleteResponse)
def delete_folder(
    folder_id: str,
    db: Session = Depends(get_db),
    storage: LocalStorage = Depends(get_storage),
    auth: AuthContext = Depends(require_auth),
):
    """Delete a folder together with its sub-folders and files."""
    service = FolderService(db, storage)
    return service.delete_folder(folder_id)
