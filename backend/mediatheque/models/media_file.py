"""Media file model."""

from sqlalchemy import Column, Index, String, Text, Integer, DateTime, ForeignKey
from sqlalchemy.sql import func
from ..database import Base


class MediaFile(Base):
    """Metadata for one uploaded asset. The bytes live in upload storage."""

    __tablename__ = "media_files"
    __table_args__ = (
        Index("ix_media_files_folder_id", "folder_id"),
        Index("ix_media_files_type", "type"),
    )

    id = Column(String(50), primary_key=True)  # med-{hex}

    name = Column(String(255), nullable=False)  # display name, editable
    original_name = Column(String(255), nullable=False)  # name as uploaded
    type = Column(String(20), nullable=False)  # image | video | document | other
    mime_type = Column(String(255), nullable=False)
    size = Column(Integer, nullable=False)

    # Storage: key is the blob name on disk, url is where it is served from
    storage_key = Column(String(255), nullable=False, unique=True)
    url = Column(Text, nullable=False)
    thumbnail_url = Column(Text, nullable=True)

    folder_id = Column(
        String(50),
        ForeignKey("media_folders.id", ondelete="CASCADE"),
        nullable=True,
    )

    alt_text = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)
    uploaded_by = Column(String(50), nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
