"""
Base repository class with common CRUD operations.
Repositories handle database access using async SQLAlchemy sessions.
"""

from typing import Any, Dict, Generic, TypeVar, Type, Optional, List, Sequence
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, delete
from sqlalchemy.exc import DBAPIError

from okr_backend.core.config import settings
from okr_backend.core.exceptions import SchemaCompatibilityError
from okr_backend.db.base import Base
from okr_backend.utils.dates import chunk

ModelType = TypeVar("ModelType", bound=Base)

_MISSING_COLUMN_MARKERS = (
    "no such column",
    "has no column named",
)


def is_missing_column_error(exc: Exception) -> bool:
    """True when the driver reports that a referenced column does not exist."""
    message = str(getattr(exc, "orig", None) or exc).lower()
    if "column" in message and "does not exist" in message:
        return True
    return any(marker in message for marker in _MISSING_COLUMN_MARKERS)


class BaseRepository(Generic[ModelType]):
    """Base repository with common CRUD operations."""

    def __init__(self, model: Type[ModelType], session: AsyncSession):
        """
        Initialize repository.

        Args:
            model: SQLAlchemy model class
            session: Async database session
        """
        self.model = model
        self.session = session

    async def create(self, **kwargs) -> ModelType:
        """
        Create a new record.

        Args:
            **kwargs: Model attributes

        Returns:
            Created model instance
        """
        instance = self.model(**kwargs)
        self.session.add(instance)
        await self.session.flush()
        await self.session.refresh(instance)
        return instance

    async def get(self, id: UUID) -> Optional[ModelType]:
        """
        Get a record by ID, always reloading column values from the database.

        Args:
            id: Record ID

        Returns:
            Model instance or None
        """
        result = await self.session.execute(
            select(self.model)
            .where(self.model.id == id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def list(
        self,
        skip: int = 0,
        limit: int = 100,
        **filters,
    ) -> List[ModelType]:
        """
        List records with pagination and filters.

        Args:
            skip: Number of records to skip
            limit: Maximum number of records to return
            **filters: Filter criteria

        Returns:
            List of model instances
        """
        query = select(self.model)

        # Apply filters
        for key, value in filters.items():
            if hasattr(self.model, key):
                query = query.where(getattr(self.model, key) == value)

        query = query.offset(skip).limit(limit)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def list_in(self, column: str, values: Sequence[Any], **filters) -> List[ModelType]:
        """
        Fetch rows whose `column` is in `values`, issuing one query per chunk of ids.

        Args:
            column: Attribute name to match against
            values: Ids to look up
            **filters: Extra equality filters applied to every chunk

        Returns:
            Merged rows from all chunks
        """
        rows: List[ModelType] = []
        attr = getattr(self.model, column)
        for batch in chunk(list(values), settings.GATEWAY_CHUNK_SIZE):
            query = select(self.model).where(attr.in_(batch))
            for key, value in filters.items():
                query = query.where(getattr(self.model, key) == value)
            result = await self.session.execute(query)
            rows.extend(result.scalars().all())
        return rows

    async def update(self, id: UUID, **kwargs) -> Optional[ModelType]:
        """
        Update a record.

        Args:
            id: Record ID
            **kwargs: Attributes to update

        Returns:
            Updated model instance or None
        """
        if kwargs:
            await self.session.execute(
                update(self.model)
                .where(self.model.id == id)
                .values(**kwargs)
            )
            await self.session.flush()
        return await self.get(id)

    async def update_with_audit(
        self,
        id: UUID,
        values: Dict[str, Any],
        audit: Dict[str, Any],
    ) -> Optional[ModelType]:
        """
        Update a record together with optional audit columns.

        Raises:
            SchemaCompatibilityError: If the live table lacks one of the audit columns
        """
        try:
            return await self.update(id, **values, **audit)
        except DBAPIError as e:
            if is_missing_column_error(e):
                raise SchemaCompatibilityError(self.model.__tablename__, str(e.orig or e)) from e
            raise

    async def delete(self, id: UUID) -> bool:
        """
        Delete a record.

        Args:
            id: Record ID

        Returns:
            True if deleted, False if not found
        """
        result = await self.session.execute(
            delete(self.model).where(self.model.id == id)
        )
        await self.session.flush()
        return result.rowcount > 0
