"""
Base repository interface for data access layer.
Repositories keep SQLAlchemy queries out of the services.
"""

from typing import Generic, TypeVar, Optional, Type
from uuid import UUID
from sqlalchemy import func
from sqlalchemy.orm import Session
from abc import ABC

ModelType = TypeVar("ModelType")


class BaseRepository(Generic[ModelType], ABC):
    """
    Base repository providing the operations shared by every aggregate.
    Subclasses name their primary key through ``id_column``.
    """

    id_column: str = ""

    def __init__(self, db: Session, model: Type[ModelType]):
        self.db = db
        self.model = model

    def _id_attr(self):
        if not self.id_column:
            raise NotImplementedError(
                f"{self.__class__.__name__} must set id_column to its primary key"
            )
        return getattr(self.model, self.id_column)

    def get_by_id(self, entity_id: UUID) -> Optional[ModelType]:
        """Get entity by primary key, or None"""
        return self.db.query(self.model).filter(self._id_attr() == entity_id).first()

    def count(self) -> int:
        """Count all rows of the model"""
        return self.db.query(func.count(self._id_attr())).scalar() or 0

