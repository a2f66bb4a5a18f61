"""
Base repository class with common CRUD operations using async SQLAlchemy.
Provides generic database operations that can be extended by specific repositories.

Every write method takes a ``commit`` flag. With ``commit=False`` the change is
only flushed so that several repository calls can be committed together by the
calling service (see ``app.database.unit_of_work``).
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, func
from sqlalchemy.sql import ColumnElement
from app.database import Base
from typing import TypeVar, Generic, Optional, List, Dict, Any, Type
import uuid
import logging

logger = logging.getLogger(__name__)

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Base repository class providing common CRUD operations.
    Uses async SQLAlchemy for all database operations.
    """

    def __init__(self, model: Type[ModelType], db: AsyncSession):
        """
        Initialize repository with model class and database session.

        Args:
            model: SQLAlchemy model class
            db: Async database session
        """
        self.model = model
        self.db = db

    async def _save(self, commit: bool) -> None:
        if commit:
            await self.db.commit()
        else:
            await self.db.flush()

    def _apply_filters(self, query, filters: Optional[Dict[str, Any]]):
        """Equality (or IN for lists) filters on model columns, skipping None values."""
        if not filters:
            return query
        for field, value in filters.items():
            if value is None or not hasattr(self.model, field):
                continue
            column = getattr(self.model, field)
            if isinstance(value, (list, tuple)):
                query = query.where(column.in_(value))
            else:
                query = query.where(column == value)
        return query

    async def create(self, obj_in: Dict[str, Any], commit: bool = True) -> ModelType:
        """
        Create a new record in the database.

        Args:
            obj_in: Dictionary of field values for the new record
            commit: Commit immediately, or only flush inside a wider transaction

        Returns:
            Created model instance

        Raises:
            Exception: If database operation fails
        """
        try:
            db_obj = self.model(**obj_in)
            self.db.add(db_obj)
            await self._save(commit)
            logger.debug(f"Created {self.model.__name__} with id: {db_obj.id}")
            return db_obj
        except Exception as e:
            if commit:
                await self.db.rollback()
            logger.error(f"Failed to create {self.model.__name__}: {e}")
            raise

    async def get_by_id(self, id: uuid.UUID, refresh: bool = False) -> Optional[ModelType]:
        """
        Get a record by its ID.

        Args:
            id: UUID of the record to retrieve
            refresh: Reload attributes and eager relationships of an instance
                already present in the session

        Returns:
            Model instance if found, None otherwise
        """
        query = select(self.model).where(self.model.id == id)
        if refresh:
            query = query.execution_options(populate_existing=True)

        result = await self.db.execute(query)
        obj = result.unique().scalar_one_or_none()

        if obj is None:
            logger.debug(f"{self.model.__name__} with id {id} not found")
        return obj

    async def get_multi(
        self,
        skip: int = 0,
        limit: Optional[int] = 100,
        filters: Optional[Dict[str, Any]] = None,
        conditions: Optional[List[ColumnElement]] = None,
        order_by: Optional[Any] = None,
    ) -> List[ModelType]:
        """
        Get multiple records with optional filtering, pagination, and ordering.

        Args:
            skip: Number of records to skip (for pagination)
            limit: Maximum number of records to return, None for all
            filters: Dictionary of equality field filters
            conditions: Extra SQL conditions (ranges, LIKE...)
            order_by: Column expression; defaults to newest first

        Returns:
            List of model instances
        """
        query = self._apply_filters(select(self.model), filters)
        for condition in conditions or []:
            query = query.where(condition)

        query = query.order_by(order_by if order_by is not None else self.model.created_at.desc())
        query = query.offset(skip)
        if limit is not None:
            query = query.limit(limit)

        result = await self.db.execute(query)
        objects = result.unique().scalars().all()

        logger.debug(f"Retrieved {len(objects)} {self.model.__name__} records")
        return list(objects)

    async def update(self, db_obj: ModelType, obj_in: Dict[str, Any], commit: bool = True) -> ModelType:
        """
        Update an existing record.

        Args:
            db_obj: Instance to update
            obj_in: Field values to set (None clears a nullable column)
            commit: Commit immediately, or only flush inside a wider transaction

        Returns:
            The updated instance

        Raises:
            Exception: If database operation fails
        """
        try:
            for field, value in obj_in.items():
                if hasattr(db_obj, field):
                    setattr(db_obj, field, value)
            await self._save(commit)
            logger.debug(f"Updated {self.model.__name__} with id: {db_obj.id}")
            return db_obj
        except Exception as e:
            if commit:
                await self.db.rollback()
            logger.error(f"Failed to update {self.model.__name__} {db_obj.id}: {e}")
            raise

    async def delete(self, id: uuid.UUID, commit: bool = True) -> bool:
        """
        Delete a record by its ID.

        Args:
            id: UUID of the record to delete
            commit: Commit immediately, or only flush inside a wider transaction

        Returns:
            True if record was deleted, False if not found
        """
        return await self.delete_where(self.model.id == id, commit=commit) > 0

    async def delete_where(self, *criteria: ColumnElement, commit: bool = True) -> int:
        """
        Delete every record matching the criteria.

        Returns:
            Number of records deleted
        """
        try:
            stmt = delete(self.model).where(*criteria).execution_options(synchronize_session=False)
            result = await self.db.execute(stmt)
            await self._save(commit)
            logger.debug(f"Deleted {result.rowcount} {self.model.__name__} records")
            return result.rowcount
        except Exception as e:
            if commit:
                await self.db.rollback()
            logger.error(f"Failed to delete {self.model.__name__} records: {e}")
            raise

    async def count(
        self,
        filters: Optional[Dict[str, Any]] = None,
        conditions: Optional[List[ColumnElement]] = None
    ) -> int:
        """
        Count records with optional filtering.

        Returns:
            Number of matching records
        """
        query = self._apply_filters(select(func.count(self.model.id)), filters)
        for condition in conditions or []:
            query = query.where(condition)
        result = await self.db.execute(query)
        return result.scalar() or 0

    async def exists(self, id: uuid.UUID) -> bool:
        """Check if a record exists by its ID."""
        return await self.count(conditions=[self.model.id == id]) > 0

    async def get_by_field(self, field: str, value: Any) -> Optional[ModelType]:
        """
        Get a record by a specific field value.

        Args:
            field: Field name to search by
            value: Value to search for

        Returns:
            Model instance if found, None otherwise

        Raises:
            ValueError: If the model has no such field
        """
        if not hasattr(self.model, field):
            raise ValueError(f"Field '{field}' does not exist on {self.model.__name__}")

        query = select(self.model).where(getattr(self.model, field) == value)
        result = await self.db.execute(query)
        return result.unique().scalars().first()

    async def bulk_create(self, objects_in: List[Dict[str, Any]], commit: bool = True) -> List[ModelType]:
        """
        Create multiple records in a single transaction.

        Args:
            objects_in: List of dictionaries with field values
            commit: Commit immediately, or only flush inside a wider transaction

        Returns:
            List of created model instances
        """
        try:
            db_objects = [self.model(**obj_data) for obj_data in objects_in]
            self.db.add_all(db_objects)
            await self._save(commit)
            logger.debug(f"Bulk created {len(db_objects)} {self.model.__name__} records")
            return db_objects
        except Exception as e:
            if commit:
                await self.db.rollback()
            logger.error(f"Failed to bulk create {self.model.__name__} records: {e}")
            raise
