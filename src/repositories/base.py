"""
Base repository with generic CRUD operations.

This module provides a generic repository pattern for database operations.
All specific repositories should inherit from BaseRepository.

Type Parameters:
    ModelType: The SQLAlchemy model class (e.g., User, Board, etc.)
"""

import uuid
from typing import Any, Generic, TypeVar

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from models.base import Base

# Type variable for the model class
ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Generic base repository for database operations.

    Provides common CRUD operations that work with any SQLAlchemy model.
    Automatically handles soft deletes by filtering out deleted records.

    Lookup misses are returned as None (or False / empty lists); repositories
    never raise for a missing row.

    Usage:
        class BoardRepository(BaseRepository[Board]):
            def __init__(self, session: AsyncSession):
                super().__init__(Board, session)
    """

    def __init__(self, model: type[ModelType], session: AsyncSession):
        """
        Initialize repository.

        Args:
            model: The SQLAlchemy model class
            session: Async database session
        """
        self.model = model
        self.session = session

    def _apply_soft_delete_filter(self, query: Select[Any]) -> Select[Any]:
        """
        Apply soft delete filter to query if model supports it.

        Args:
            query: SQLAlchemy select statement

        Returns:
            Query with soft delete filter applied
        """
        if hasattr(self.model, "deleted_at"):
            query = query.where(self.model.deleted_at.is_(None))
        return query

    async def _paginate(
        self,
        query: Select[Any],
        offset: int,
        limit: int,
    ) -> tuple[list[ModelType], int]:
        """
        Run a filtered query as one page plus a total count.

        The count is taken before ordering/offset/limit are applied, so callers
        may pass an already-ordered query.

        Returns:
            Tuple of (items, total_count)
        """
        count_query = select(func.count()).select_from(query.order_by(None).subquery())
        total = (await self.session.execute(count_query)).scalar_one()

        result = await self.session.execute(query.offset(offset).limit(limit))
        return list(result.scalars().all()), total

    async def add(self, instance: ModelType) -> ModelType:
        """
        Persist a model instance.

        Args:
            instance: Model instance to persist

        Returns:
            Persisted model instance (with ID and timestamps populated)
        """
        self.session.add(instance)
        await self.session.flush()
        await self.session.refresh(instance)
        return instance

    async def get_by_id(self, id: uuid.UUID) -> ModelType | None:
        """
        Get a record by ID.

        Automatically filters out soft-deleted records.

        Example:
            board = await board_repo.get_by_id(board_id)
            if board is None:
                raise AppException.not_found("Board")
        """
        query = select(self.model).where(self.model.id == id)
        query = self._apply_soft_delete_filter(query)

        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def update(self, instance: ModelType) -> ModelType:
        """
        Persist changes to an already-modified model instance.

        The caller modifies the instance attributes before calling this
        method. This method only handles persistence (flush + refresh).

        Example:
            board.title = "New title"
            board = await board_repo.update(board)
        """
        await self.session.flush()
        await self.session.refresh(instance)
        return instance

    async def soft_delete(self, instance: ModelType) -> ModelType:
        """
        Soft delete a record (set deleted_at timestamp).

        Only works if model has deleted_at attribute (SoftDeleteMixin).

        Raises:
            AttributeError: If model doesn't support soft delete
        """
        if not hasattr(instance, "mark_deleted"):
            raise AttributeError(f"{self.model.__name__} does not support soft delete")

        instance.mark_deleted()

        await self.session.flush()
        await self.session.refresh(instance)
        return instance

    async def count(self) -> int:
        """
        Count records, excluding soft-deleted ones.

        Example:
            total_boards = await board_repo.count()
        """
        query = select(func.count()).select_from(self.model)
        query = self._apply_soft_delete_filter(query)

        result = await self.session.execute(query)
        return result.scalar_one()

    async def exists(self, id: uuid.UUID) -> bool:
        """
        Check if a record exists by ID.

        Automatically filters out soft-deleted records.
        """
        query = select(func.count()).select_from(self.model).where(self.model.id == id)
        query = self._apply_soft_delete_filter(query)

        result = await self.session.execute(query)
        return result.scalar_one() > 0
