"""Media folder model."""

from sqlalchemy import Column, Index, String, DateTime, ForeignKey
from sqlalchemy.sql import func
from ..database import Base


class MediaFolder(Base):
    """A named node in the media hierarchy. ``parent_id`` NULL means root."""

    __tablename__ = "media_folders"
    __table_args__ = (
        Index("ix_media_folders_parent_id", "parent_id"),
    )

    id = Column(String(50), primary_key=True)  # fld-{hex}
    name = Column(String(255), nullable=False)
    parent_id = Column(
        String(50),
        ForeignKey("media_folders.id", ondelete="CASCADE"),
        nullable=True,
    )
    created_by = Column(String(50), nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
