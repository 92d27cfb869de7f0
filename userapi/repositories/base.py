"""Base repository implementation.

Provides common database operations and patterns for all repository classes.
"""

from abc import ABC
from typing import TypeVar, Generic, List, Optional
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
import logging

logger = logging.getLogger(__name__)

# Generic type for model classes
ModelType = TypeVar('ModelType')

# Largest id a 64-bit INTEGER primary key can hold
MAX_ID = 2 ** 63 - 1


class BaseRepository(Generic[ModelType], ABC):
    """Base repository class with common CRUD operations."""

    def __init__(self, db_session: Session, model_class: type):
        """Initialize repository with database session and model class.

        Args:
            db_session: SQLAlchemy database session
            model_class: SQLAlchemy model class
        """
        self.db = db_session
        self.model_class = model_class

    def create(self, **kwargs) -> ModelType:
        """Create a new record.

        Args:
            **kwargs: Field values for the new record

        Returns:
            Created model instance

        Raises:
            IntegrityError: If database constraints are violated
        """
        try:
            instance = self.model_class(**kwargs)
            self.db.add(instance)
            self.db.commit()
            self.db.refresh(instance)
            logger.info(f"Created {self.model_class.__name__} with id {instance.id}")
            return instance
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(f"Failed to create {self.model_class.__name__}: {e.orig}")
            raise

    def get_by_id(self, id: int, for_update: bool = False) -> Optional[ModelType]:
        """Get a record by its ID.

        Args:
            id: Record ID
            for_update: Lock the row until the session commits, where the
                dialect supports row locks

        Returns:
            Model instance if found, None otherwise
        """
        if not -MAX_ID <= id <= MAX_ID:
            return None
        query = self.db.query(self.model_class).filter(self.model_class.id == id)
        if for_update:
            query = query.with_for_update()
        return query.first()

    def get_all(self) -> List[ModelType]:
        """Get all records in insertion (id) order."""
        return self.db.query(self.model_class).order_by(self.model_class.id).all()

    def update(self, record_id: int, **kwargs) -> Optional[ModelType]:
        """Update a record.

        The row is read and written inside one transaction with a row lock so a
        concurrent update of the same id is serialized behind this one.

        Args:
            record_id: Record ID
            **kwargs: Fields to update; an `id` key is ignored

        Returns:
            Updated model instance if found, None otherwise

        Raises:
            IntegrityError: If database constraints are violated
        """
        try:
            instance = self.get_by_id(record_id, for_update=True)
            if not instance:
                self.db.rollback()
                return None

            for field, value in kwargs.items():
                if field != 'id' and hasattr(instance, field):
                    setattr(instance, field, value)

            self.db.commit()
            self.db.refresh(instance)
            logger.info(f"Updated {self.model_class.__name__} with id {record_id}")
            return instance
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(f"Failed to update {self.model_class.__name__} {record_id}: {e.orig}")
            raise

    def delete(self, id: int) -> bool:
        """Delete a record.

        Args:
            id: Record ID

        Returns:
            True if deleted, False if not found
        """
        instance = self.get_by_id(id, for_update=True)
        if not instance:
            self.db.rollback()
            return False

        self.delete_instance(instance)
        return True

    def delete_instance(self, instance: ModelType) -> None:
        """Delete an already loaded record and commit.

        Args:
            instance: Model instance from this repository's session
        """
        record_id = instance.id
        self.db.delete(instance)
        self.db.commit()
        logger.info(f"Deleted {self.model_class.__name__} with id {record_id}")

    def count(self) -> int:
        """Count all records."""
        return self.db.query(self.model_class).count()
