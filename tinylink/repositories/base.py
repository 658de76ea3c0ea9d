"""Base repository implementation for the TinyLink service.

This module provides a generic BaseRepository class that follows the Repository pattern
for database operations, serving as a foundation for more specific repositories.
"""

from typing import Any, Dict, Generic, Optional, Type, TypeVar, Union
import logging

from pydantic import BaseModel
from sqlalchemy import select, func, delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import SQLModel

# Type variable for model types
T = TypeVar("T", bound=SQLModel)
CreateSchemaType = TypeVar("CreateSchemaType", bound=BaseModel)

logger = logging.getLogger(__name__)


class RepositoryError(Exception):
    """Base exception for repository errors."""
    pass


class DuplicateEntityError(RepositoryError):
    """Exception raised when a unique constraint is violated."""

    def __init__(self, model_type: Type[SQLModel], field_name: str, value: Any):
        self.model_type = model_type
        self.field_name = field_name
        self.value = value
        model_name = getattr(model_type, "__name__", "Entity")
        super().__init__(f"{model_name} with {field_name}={value} already exists")


class BaseRepository(Generic[T, CreateSchemaType]):
    """
    Base repository implementing common CRUD operations for SQLModel entities.

    Repositories never commit; the caller owns the transaction. Every
    SQLAlchemy error is wrapped in RepositoryError so the layers above
    never see driver details.

    Type parameters:
        T: The SQLModel type this repository manages
        CreateSchemaType: The Pydantic model type for creation operations
    """

    # Column reported in DuplicateEntityError when an insert hits a unique constraint
    unique_field: str = "id"

    def __init__(self, model_type: Type[T]):
        """
        Initialize the repository with a specific model type.

        Args:
            model_type: The SQLModel class this repository will work with
        """
        self.model_type = model_type

    async def get_by_id(self, db: AsyncSession, id: Any) -> Optional[T]:
        """
        Get an entity by its primary key.

        Args:
            db: Database session
            id: Primary key value

        Returns:
            The entity if found, None otherwise
        """
        try:
            return await db.get(self.model_type, id)
        except SQLAlchemyError as e:
            logger.error(f"Error retrieving {self.model_type.__name__} with id {id}: {e}")
            raise RepositoryError(f"Database error retrieving entity: {e}") from e

    async def create(self, db: AsyncSession, data: Union[CreateSchemaType, Dict[str, Any]]) -> T:
        """
        Create a new entity.

        Args:
            db: Database session
            data: Entity data (either as a Pydantic model or dictionary)

        Returns:
            The created entity

        Raises:
            DuplicateEntityError: If a unique constraint rejects the row
            RepositoryError: On other database errors
        """
        if isinstance(data, BaseModel):
            data_dict = data.model_dump(exclude_unset=True)
        else:
            data_dict = dict(data)

        try:
            entity = self.model_type(**data_dict)
            db.add(entity)
            await db.flush()  # Surface constraint violations now, commit later

            # Pick up server defaults
            await db.refresh(entity)
            return entity
        except IntegrityError as e:
            logger.info(f"Unique constraint rejected {self.model_type.__name__}: {e.orig}")
            raise DuplicateEntityError(
                self.model_type, self.unique_field, data_dict.get(self.unique_field)
            ) from e
        except SQLAlchemyError as e:
            logger.error(f"Error creating {self.model_type.__name__}: {e}")
            raise RepositoryError(f"Database error creating entity: {e}") from e

    async def count(self, db: AsyncSession) -> int:
        """
        Count the total number of entities.

        Args:
            db: Database session

        Returns:
            Total count of entities
        """
        try:
            query = select(func.count()).select_from(self.model_type)
            result = await db.execute(query)
            return result.scalar_one()
        except SQLAlchemyError as e:
            logger.error(f"Error counting {self.model_type.__name__} records: {e}")
            raise RepositoryError(f"Database error counting entities: {e}") from e

    async def exists(self, db: AsyncSession, **kwargs) -> bool:
        """
        Check if an entity exists with the given filters.

        Args:
            db: Database session
            **kwargs: Field=value pairs to filter by

        Returns:
            True if entity exists, False otherwise
        """
        conditions = [getattr(self.model_type, field) == value for field, value in kwargs.items()]
        if not conditions:
            raise ValueError("No conditions provided for exists check")

        try:
            query = select(func.count()).select_from(self.model_type).where(*conditions)
            result = await db.execute(query)
            return result.scalar_one() > 0
        except SQLAlchemyError as e:
            logger.error(f"Error checking existence of {self.model_type.__name__}: {e}")
            raise RepositoryError(f"Database error checking entity existence: {e}") from e

    async def bulk_delete(self, db: AsyncSession, **filters) -> int:
        """
        Delete every entity matching filters.

        Args:
            db: Database session
            **filters: Field=value pairs to filter by

        Returns:
            Number of rows deleted
        """
        conditions = [getattr(self.model_type, field) == value for field, value in filters.items()]
        if not conditions:
            raise ValueError("No conditions provided for bulk delete")

        try:
            stmt = delete(self.model_type).where(*conditions)
            result = await db.execute(stmt)
            return result.rowcount
        except SQLAlchemyError as e:
            logger.error(f"Error deleting {self.model_type.__name__} records: {e}", exc_info=True)
            raise RepositoryError(f"Database error deleting entities: {e}") from e
