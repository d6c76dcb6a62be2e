"""
Base repository class with common CRUD operations using async SQLAlchemy.
Store failures never escape a repository: every operation returns a DAOResult
that callers inspect to decide how to respond.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy import select, update, delete, func
from qrinstruct.database import Base
from dataclasses import dataclass, field
from typing import TypeVar, Generic, Optional, List, Dict, Any, Type
import uuid
import logging

logger = logging.getLogger(__name__)

ModelType = TypeVar("ModelType", bound=Base)
T = TypeVar("T")


class ResultCode:
    """Codes attached to failed results."""
    NOT_FOUND = "NOT_FOUND"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    CONFLICT = "CONFLICT"
    DATABASE_ERROR = "DATABASE_ERROR"


@dataclass
class DAOResult(Generic[T]):
    """Uniform outcome of a data-access call: data on success, error otherwise."""

    success: bool
    data: Optional[T] = None
    error: Optional[str] = None
    code: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def ok(cls, data: Any = None, **extra: Any) -> "DAOResult":
        return cls(success=True, data=data, extra=extra)

    @classmethod
    def not_found(cls, resource: str, resource_id: Any = None) -> "DAOResult":
        message = f"{resource} not found"
        if resource_id is not None:
            message += f" with ID: {resource_id}"
        return cls(success=False, error=message, code=ResultCode.NOT_FOUND)

    @classmethod
    def invalid(cls, message: str) -> "DAOResult":
        return cls(success=False, error=message, code=ResultCode.VALIDATION_ERROR)

    @classmethod
    def conflict(cls, message: str) -> "DAOResult":
        return cls(success=False, error=message, code=ResultCode.CONFLICT)

    @classmethod
    def failure(cls, message: str) -> "DAOResult":
        return cls(success=False, error=message, code=ResultCode.DATABASE_ERROR)

    @property
    def is_not_found(self) -> bool:
        return self.code == ResultCode.NOT_FOUND


class BaseRepository(Generic[ModelType]):
    """
    Base repository class providing common CRUD operations.
    Uses async SQLAlchemy for all database operations with proper error handling.
    """

    resource_name: Optional[str] = None

    def __init__(self, model: Type[ModelType], db: AsyncSession):
        """
        Initialize repository with model class and database session.

        Args:
            model: SQLAlchemy model class
            db: Async database session
        """
        self.model = model
        self.db = db
        self.resource = self.resource_name or model.__name__

    async def _fail(self, action: str, error: SQLAlchemyError) -> DAOResult:
        """Roll back and turn a store error into a failed result."""
        await self.db.rollback()
        logger.error(f"Failed to {action} {self.resource}: {error}")
        return DAOResult.failure(f"Failed to {action} {self.resource.lower()}: {error}")

    async def create(self, obj_in: Dict[str, Any]) -> DAOResult[ModelType]:
        """
        Create a new record in the database.

        Args:
            obj_in: Dictionary of field values for the new record

        Returns:
            Result holding the created model instance
        """
        try:
            db_obj = self.model(**obj_in)
            self.db.add(db_obj)
            await self.db.commit()
            await self.db.refresh(db_obj)
            logger.debug(f"Created {self.resource} with id: {db_obj.id}")
            return DAOResult.ok(db_obj)
        except SQLAlchemyError as e:
            return await self._fail("create", e)

    async def get_by_id(self, id: uuid.UUID) -> DAOResult[ModelType]:
        """
        Get a record by its ID.

        Returns:
            Result holding the instance, or a NOT_FOUND result
        """
        return await self.get_by_field("id", id)

    async def get_by_field(self, field_name: str, value: Any) -> DAOResult[ModelType]:
        """
        Get a single record by a specific field value.

        Args:
            field_name: Field name to search by
            value: Value to search for

        Returns:
            Result holding the instance, or a NOT_FOUND result
        """
        if not hasattr(self.model, field_name):
            return DAOResult.invalid(f"Field '{field_name}' does not exist on {self.resource}")

        try:
            query = (
                select(self.model)
                .where(getattr(self.model, field_name) == value)
                .execution_options(populate_existing=True)
            )
            result = await self.db.execute(query)
            obj = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            return await self._fail("fetch", e)

        if obj is None:
            logger.debug(f"{self.resource} with {field_name}={value} not found")
            return DAOResult.not_found(self.resource, value)

        logger.debug(f"Retrieved {self.resource} by {field_name}: {value}")
        return DAOResult.ok(obj)

    async def get_multi(
        self,
        filters: Optional[Dict[str, Any]] = None,
        order_by: Optional[str] = None,
    ) -> DAOResult[List[ModelType]]:
        """
        Get multiple records with optional filtering and ordering.

        Args:
            filters: Dictionary of field filters (lists become IN clauses)
            order_by: Field name to order by (prefix with '-' for descending);
                      defaults to newest first

        Returns:
            Result holding a list of model instances
        """
        try:
            query = select(self.model).execution_options(populate_existing=True)
            query = self._apply_filters(query, filters)

            if order_by:
                descending = order_by.startswith('-')
                field_name = order_by.lstrip('-')
                if hasattr(self.model, field_name):
                    column = getattr(self.model, field_name)
                    query = query.order_by(column.desc() if descending else column)
            else:
                query = query.order_by(self.model.created_at.desc())

            result = await self.db.execute(query)
            objects = list(result.scalars().all())
        except SQLAlchemyError as e:
            return await self._fail("list", e)

        logger.debug(f"Retrieved {len(objects)} {self.resource} records")
        return DAOResult.ok(objects, count=len(objects))

    async def update(self, id: uuid.UUID, obj_in: Dict[str, Any]) -> DAOResult[ModelType]:
        """
        Update a record by its ID. Values are written as given, so None clears a column.

        Returns:
            Result holding the updated instance, or a NOT_FOUND result
        """
        if not obj_in:
            return DAOResult.invalid("Update data is required")

        try:
            stmt = update(self.model).where(self.model.id == id).values(**obj_in)
            result = await self.db.execute(stmt)

            if result.rowcount == 0:
                await self.db.rollback()
                logger.debug(f"{self.resource} with id {id} not found for update")
                return DAOResult.not_found(self.resource, id)

            await self.db.commit()
        except SQLAlchemyError as e:
            return await self._fail("update", e)

        logger.debug(f"Updated {self.resource} with id: {id}")
        return await self.get_by_id(id)

    async def delete(self, id: uuid.UUID) -> DAOResult[bool]:
        """
        Delete a record by its ID. Dependent rows go through the store's cascade rules.

        Returns:
            Result holding True, or a NOT_FOUND result
        """
        try:
            stmt = delete(self.model).where(self.model.id == id)
            result = await self.db.execute(stmt)
            await self.db.commit()
        except SQLAlchemyError as e:
            return await self._fail("delete", e)

        if result.rowcount == 0:
            logger.debug(f"{self.resource} with id {id} not found for deletion")
            return DAOResult.not_found(self.resource, id)

        # Rows removed by ON DELETE CASCADE are still in the identity map
        self.db.expunge_all()
        logger.debug(f"Deleted {self.resource} with id: {id}")
        return DAOResult.ok(True)

    async def count(self, filters: Optional[Dict[str, Any]] = None) -> DAOResult[int]:
        """Count records with optional filtering."""
        try:
            query = self._apply_filters(select(func.count(self.model.id)), filters)
            result = await self.db.execute(query)
            total = result.scalar() or 0
        except SQLAlchemyError as e:
            return await self._fail("count", e)

        logger.debug(f"Counted {total} {self.resource} records")
        return DAOResult.ok(total)

    def _apply_filters(self, query, filters: Optional[Dict[str, Any]]):
        if not filters:
            return query
        for field_name, value in filters.items():
            if not hasattr(self.model, field_name):
                continue
            column = getattr(self.model, field_name)
            if isinstance(value, (list, tuple, set)):
                query = query.where(column.in_(list(value)))
            else:
                query = query.where(column == value)
        return query
