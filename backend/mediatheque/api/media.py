"""Media file API: filtered listing, batch upload, metadata edit, move,
delete and library stats.
"""

import logging
from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from sqlalchemy.orm import Session
from typing import List, Optional

from ..core.auth import AuthContext, require_auth
from ..core.config import settings
from ..database import get_db
from ..schemas.folder import normalize_parent_id
from ..schemas.media import (
    FileType,
    MediaFileListResponse,
    MediaFileMove,
    MediaFileResponse,
    MediaFileUpdate,
    MediaStatsResponse,
    MessageResponse,
    UploadResponse,
)
from ..services.media_service import MediaService
from ..services.upload_service import IncomingFile, UploadService
from ..storage import LocalStorage, get_storage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/media", tags=["media"])


@router.get("/files", response_model=MediaFileListResponse)
def list_files(
    folder_id: Optional[str] = Query(None, description="Folder id; omit or 'root' for the top level"),
    search: Optional[str] = Query(None, max_length=255),
    file_type: Optional[FileType] = Query(None, alias="type"),
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_auth),
):
    """Files directly inside one folder, filtered by name and type."""
    service = MediaService(db)
    files = service.list_files(normalize_parent_id(folder_id), search=search, file_type=file_type)
    return MediaFileListResponse(files=[MediaFileResponse.model_validate(f) for f in files])


@router.get("/stats", response_model=MediaStatsResponse)
def get_stats(
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_auth),
):
    return MediaService(db).compute_stats()


@router.post("/upload", response_model=UploadResponse, status_code=201)
def upload_files(
    files: List[UploadFile] = File(...),
    folder_id: Optional[str] = Form(None),
    db: Session = Depends(get_db),
    storage: LocalStorage = Depends(get_storage),
    auth: AuthContext = Depends(require_auth),
):
    """Commit a batch of files into one folder. All files are stored or none."""
    # One byte past the limit is enough for the size check to fire.
    incoming = [
        IncomingFile(
            filename=upload.filename or "",
            content_type=upload.content_type,
            data=upload.file.read(settings.max_upload_size + 1),
        )
        for upload in files
    ]
    service = UploadService(db, storage)
    created = service.commit_batch(incoming, normalize_parent_id(folder_id), uploaded_by=auth.user_id)
    return UploadResponse(files=[MediaFileResponse.model_validate(f) for f in created])


@router.get("/files/{file_id}", response_model=MediaFileResponse)
def get_file(
    file_id: str,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_auth),
):
    return MediaService(db).get_file(file_id)


@router.put("/files/{file_id}", response_model=MediaFileResponse)
def update_file(
    file_id: str,
    data: MediaFileUpdate,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_auth),
):
    """Edit name, alt text or description."""
    return MediaService(db).update_metadata(file_id, data)


@router.put("/files/{file_id}/move", response_model=MediaFileResponse)
def move_file(
    file_id: str,
    data: MediaFileMove,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(require_auth),
):
    return MediaService(db).move_file(file_id, data.folder_id)


@router.delete("/files/{file_id}", response_model=MessageResponse)
def delete_file(
    file_id: str,
    db: Session = Depends(get_db),
    storage: LocalStorage = Depends(get_storage),
    auth: AuthContext = Depends(require_auth),
):
    name = MediaService(db, storage).delete_file(file_id)
    return MessageResponse(message=f"File '{name}' deleted")
