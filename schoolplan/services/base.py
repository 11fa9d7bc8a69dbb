"""Base service class with transaction management for database operations."""

import logging
from typing import Any, Generic, Optional, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import DBAPIError, IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from schoolplan.exceptions import (
    DatabaseConnectionError,
    DuplicateRecordError,
    RecordNotFoundError,
    RelatedRecordNotFoundError,
)
from schoolplan.models.base import BaseModel

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)
R = TypeVar("R", bound=BaseModel)


class BaseService(Generic[T]):
    """Base service class managing database transactions for model operations.

    Provides automatic transaction management using direct SQLAlchemy queries:
    - Write operations (create, update, delete) automatically commit
    - Read operations (get_by_id, require_related) don't commit
    - All errors trigger automatic rollback

    Usage:
        class RoomService(BaseService[Room]):
            model = Room

        service = RoomService(db_session)
        room = await service.create(name="B12")
        # Transaction is automatically committed

    Attributes:
        db: Database session for operations
        model: Model class this service manages
    """

    model: type[T]

    def __init__(self, db: AsyncSession) -> None:
        """Initialize service with database session.

        Args:
            db: Database session for operations
        """
        self.db = db

    async def create(self, **kwargs: Any) -> T:
        """Create a new record and commit transaction.

        Args:
            **kwargs: Model attributes

        Returns:
            Created model instance

        Raises:
            DuplicateRecordError: If a unique constraint is violated
            DatabaseConnectionError: If database operation fails
        """
        try:
            instance = self.model(**kwargs)
            self.db.add(instance)
            await self.db.flush()
            await self.db.refresh(instance)
            await self.db.commit()
            logger.debug(
                f"Created {self.model.__name__}",
                extra={"model": self.model.__name__, "id": instance.id},
            )
            return instance
        except IntegrityError as e:
            await self.db.rollback()
            logger.warning(
                f"Integrity violation creating {self.model.__name__}",
                extra={"model": self.model.__name__, "error": str(e)},
            )
            raise DuplicateRecordError(
                self.model.__name__, detail=f"Integrity constraint violation: {str(e)}"
            ) from e
        except (DBAPIError, SQLAlchemyError) as e:
            await self.db.rollback()
            logger.error(
                f"Failed to create {self.model.__name__}",
                extra={"model": self.model.__name__, "error": str(e)},
                exc_info=True,
            )
            raise DatabaseConnectionError(
                f"Database error during create: {str(e)}"
            ) from e

    async def get_by_id(self, record_id: int) -> Optional[T]:
        """Retrieve a record by its primary key ID.

        This is a read operation and does not commit the transaction.

        Args:
            record_id: Primary key ID

        Returns:
            Model instance or None if not found

        Raises:
            DatabaseConnectionError: If database operation fails
        """
        try:
            result = await self.db.execute(
                select(self.model).where(self.model.id == record_id)
            )
            return result.scalar_one_or_none()
        except (DBAPIError, SQLAlchemyError) as e:
            logger.error(
                f"Failed to get {self.model.__name__} by id",
                extra={"model": self.model.__name__, "id": record_id, "error": str(e)},
                exc_info=True,
            )
            raise DatabaseConnectionError(f"Database error during get: {str(e)}") from e

    async def get_by_id_or_fail(self, record_id: int) -> T:
        """Retrieve a record by ID or raise exception if not found.

        Raises:
            RecordNotFoundError: If record not found
            DatabaseConnectionError: If database operation fails
        """
        record = await self.get_by_id(record_id)
        if record is None:
            raise RecordNotFoundError(self.model.__name__, record_id)
        return record

    async def delete(self, record_id: int) -> None:
        """Delete a record and commit transaction.

        Args:
            record_id: Primary key ID of record to delete

        Raises:
            RecordNotFoundError: If record not found
            DatabaseConnectionError: If database operation fails
        """
        try:
            record = await self.get_by_id_or_fail(record_id)
            await self.db.delete(record)
            await self.db.flush()
            await self.db.commit()
            logger.debug(
                f"Deleted {self.model.__name__}",
                extra={"model": self.model.__name__, "id": record_id},
            )
        except RecordNotFoundError:
            await self.db.rollback()
            raise
        except (DBAPIError, SQLAlchemyError) as e:
            await self.db.rollback()
            logger.error(
                f"Failed to delete {self.model.__name__}",
                extra={
                    "model": self.model.__name__,
                    "id": record_id,
                    "error": str(e),
                },
                exc_info=True,
            )
            raise DatabaseConnectionError(
                f"Database error during delete: {str(e)}"
            ) from e

    async def require_related(
        self, related_model: type[R], field: str, record_id: Any
    ) -> R:
        """Load a referenced record or fail with a field-level error.

        Args:
            related_model: Model class the field points at
            field: Request field name, reported back on failure
            record_id: Referenced primary key

        Returns:
            The referenced record

        Raises:
            RelatedRecordNotFoundError: If no such record exists
            DatabaseConnectionError: If database operation fails
        """
        try:
            result = await self.db.execute(
                select(related_model).where(related_model.id == record_id)
            )
            record = result.scalar_one_or_none()
        except (DBAPIError, SQLAlchemyError) as e:
            logger.error(
                f"Failed to load related {related_model.__name__}",
                extra={"field": field, "id": record_id, "error": str(e)},
                exc_info=True,
            )
            raise DatabaseConnectionError(
                f"Database error during reference check: {str(e)}"
            ) from e
        if record is None:
            raise RelatedRecordNotFoundError(field, record_id)
        return record
