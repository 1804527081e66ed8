"""Base repository with the shared get-by-ID pattern.

Subclasses set ``model_class`` and ``not_found_error``; the base supplies
``get_by_id`` (raises) and ``get_by_id_optional`` (returns None).
"""

import uuid
from typing import TypeVar, Generic, Optional, Type
from sqlalchemy.orm import Session, Query

from ..database import Base
from ..exceptions import MediaException

ModelT = TypeVar("ModelT", bound=Base)


class BaseRepository(Generic[ModelT]):
    """Shared repository logic for SQLAlchemy models.

    Class variables to set in subclasses:
        model_class:     The SQLAlchemy model (e.g., MediaFolder)
        id_prefix:       Prefix for generated ids (e.g., "fld")
        not_found_error: Exception class to raise from get_by_id
    """

    model_class: Type[ModelT]
    id_prefix: str
    not_found_error: Type[MediaException]

    def __init__(self, db: Session):
        self.db = db

    def _base_query(self) -> Query:
        return self.db.query(self.model_class)

    def new_id(self) -> str:
        """Random opaque id, e.g. ``fld-3f2a9c1b7d4e``."""
        return f"{self.id_prefix}-{uuid.uuid4().hex[:12]}"

    def get_by_id(self, entity_id: str) -> ModelT:
        """Get entity by primary key. Raises not_found_error if missing."""
        entity = self.get_by_id_optional(entity_id)
        if entity is None:
            raise self.not_found_error(entity_id)
        return entity

    def get_by_id_optional(self, entity_id: str) -> Optional[ModelT]:
        return self._base_query().filter(self.model_class.id == entity_id).first()
