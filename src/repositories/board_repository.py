"""
Board repository for board-specific database operations.

Every query here excludes soft-deleted boards. Listing methods return
a (items, total) tuple ready for pagination metadata.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Any

from sqlalchemy import Select, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from models.board import Board
from models.user import User
from repositories.base import BaseRepository


class BoardSortField(str, Enum):
    """Columns a board listing may be sorted by."""

    CREATED_AT = "created_at"
    UPDATED_AT = "updated_at"
    TITLE = "title"
    VIEW_COUNT = "view_count"


class BoardRepository(BaseRepository[Board]):
    """
    Repository for Board model operations.

    Extends BaseRepository with:
    - Listings by category, author, pin flag and popularity
    - Keyword search across title, content and author name
    - Count queries used by the statistics endpoint
    - Atomic view-count increment
    """

    def __init__(self, session: AsyncSession):
        super().__init__(Board, session)

    def _live(self) -> Select[Any]:
        return self._apply_soft_delete_filter(select(Board))

    @staticmethod
    def _ordered(
        query: Select[Any],
        sort_by: BoardSortField = BoardSortField.CREATED_AT,
        descending: bool = True,
    ) -> Select[Any]:
        column = getattr(Board, sort_by.value)
        query = query.order_by(column.desc() if descending else column.asc())
        # Secondary sort for stable pages
        if sort_by is BoardSortField.CREATED_AT:
            return query.order_by(Board.id.desc() if descending else Board.id.asc())
        return query.order_by(Board.created_at.desc(), Board.id.desc())

    # -------------------------------------------------------------------------
    # Lookups and listings
    # -------------------------------------------------------------------------

    async def list_active(
        self,
        offset: int = 0,
        limit: int = 20,
        sort_by: BoardSortField = BoardSortField.CREATED_AT,
        descending: bool = True,
    ) -> tuple[list[Board], int]:
        """Page through every non-deleted board."""
        query = self._ordered(self._live(), sort_by, descending)
        return await self._paginate(query, offset, limit)

    async def list_by_category(
        self,
        category: str,
        offset: int = 0,
        limit: int = 20,
        sort_by: BoardSortField = BoardSortField.CREATED_AT,
        descending: bool = True,
    ) -> tuple[list[Board], int]:
        query = self._live().where(Board.category == category)
        return await self._paginate(self._ordered(query, sort_by, descending), offset, limit)

    async def list_by_author(
        self,
        author_id: uuid.UUID,
        offset: int = 0,
        limit: int = 20,
        sort_by: BoardSortField = BoardSortField.CREATED_AT,
        descending: bool = True,
    ) -> tuple[list[Board], int]:
        query = self._live().where(Board.author_id == author_id)
        return await self._paginate(self._ordered(query, sort_by, descending), offset, limit)

    async def list_pinned(self) -> list[Board]:
        """All pinned, non-deleted boards, newest first. Not paginated."""
        query = self._live().where(Board.is_pinned.is_(True)).order_by(Board.created_at.desc())
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def list_popular(self, offset: int = 0, limit: int = 10) -> tuple[list[Board], int]:
        query = self._ordered(self._live(), BoardSortField.VIEW_COUNT, descending=True)
        return await self._paginate(query, offset, limit)

    async def search(
        self,
        keyword: str | None = None,
        category: str | None = None,
        author_id: uuid.UUID | None = None,
        offset: int = 0,
        limit: int = 20,
    ) -> tuple[list[Board], int]:
        """
        Search non-deleted boards.

        The keyword is matched case-insensitively against the title, the
        content and the author's full name. Every filter is optional.

        Returns:
            Tuple of (boards, total_count)
        """
        query = self._live()

        if keyword:
            pattern = f"%{keyword}%"
            query = query.join(User, Board.author_id == User.id).where(
                or_(
                    Board.title.ilike(pattern),
                    Board.content.ilike(pattern),
                    User.full_name.ilike(pattern),
                )
            )
        if category:
            query = query.where(Board.category == category)
        if author_id is not None:
            query = query.where(Board.author_id == author_id)

        return await self._paginate(self._ordered(query), offset, limit)

    # -------------------------------------------------------------------------
    # Counters
    # -------------------------------------------------------------------------

    async def count_by_category(self) -> list[tuple[str | None, int]]:
        """Non-deleted board counts grouped by category (NULL included)."""
        query = (
            select(Board.category, func.count())
            .where(Board.deleted_at.is_(None))
            .group_by(Board.category)
        )
        result = await self.session.execute(query)
        return [(category, count) for category, count in result.all()]

    async def count_created_between(self, start: datetime, end: datetime) -> int:
        """Count non-deleted boards with start <= created_at <= end."""
        query = (
            select(func.count())
            .select_from(Board)
            .where(
                Board.deleted_at.is_(None),
                Board.created_at >= start,
                Board.created_at <= end,
            )
        )
        result = await self.session.execute(query)
        return result.scalar_one()

    async def increment_view_count(self, board_id: uuid.UUID) -> None:
        """
        Add one to view_count in a single UPDATE.

        Loaded Board instances are not refreshed.
        """
        stmt = (
            update(Board)
            .where(Board.id == board_id)
            .values(view_count=Board.view_count + 1)
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(stmt)
