"""
Board service: the board lifecycle and its moderation rules.

This module provides:
- Create / update with field validation and HTML sanitization
- Detail lookup with an atomic view-count increment
- Listings (all, by category, by author, pinned, popular, recent) and search
- Soft delete and pin/unpin, gated by authorship or privilege
- Aggregate statistics computed with count queries

The caller is always passed in explicitly as current_user.
"""

import logging
import uuid
from datetime import UTC, datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import AppException
from core.sanitizer import sanitize_html
from models.board import Board
from models.user import User
from repositories.board_repository import BoardRepository, BoardSortField
from repositories.user_repository import UserRepository
from schemas.board import BoardCreate, BoardStatistics, BoardUpdate
from schemas.common import PaginationParams, SortOrder
from services.permission_service import PermissionService

logger = logging.getLogger(__name__)


UNCATEGORIZED_LABEL = "uncategorized"
STATISTICS_WEEK_DAYS = 7


class BoardService:
    """
    Service class for board operations.

    All methods require an active database session. Write operations
    commit before returning.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.board_repo = BoardRepository(session)
        self.user_repo = UserRepository(session)
        self.permissions = PermissionService(session)

    # -------------------------------------------------------------------------
    # Create / read
    # -------------------------------------------------------------------------

    async def create_board(self, data: BoardCreate, current_user: User) -> Board:
        """
        Create a board written by current_user.

        Title and content must not be blank; nothing is written otherwise.

        Raises:
            AppException: VALIDATION kind naming the offending field
        """
        if not data.title or not data.title.strip():
            raise AppException.validation("Title is required", field="title")
        if not data.content or not data.content.strip():
            raise AppException.validation("Content is required", field="content")

        content = sanitize_html(data.content)

        board = Board(
            title=data.title.strip(),
            content=content,
            category=data.category,
            author_id=current_user.id,
            author=current_user,
            view_count=0,
            is_pinned=False,
        )
        board = await self.board_repo.add(board)
        await self.session.commit()

        logger.info(f"Board created: {board.id} by {current_user.username}")
        return board

    async def get_board(self, board_id: uuid.UUID) -> Board:
        """
        Get a non-deleted board and count the view.

        The returned board carries the view count read before the increment.

        Raises:
            AppException: NOT_FOUND kind if the board is missing or deleted
        """
        board = await self._get_live_board(board_id)

        await self.board_repo.increment_view_count(board.id)
        await self.session.commit()

        return board

    # -------------------------------------------------------------------------
    # Listings
    # -------------------------------------------------------------------------

    async def list_boards(
        self,
        pagination: PaginationParams,
        sort_by: BoardSortField = BoardSortField.CREATED_AT,
        sort_order: SortOrder = SortOrder.DESC,
    ) -> tuple[list[Board], int]:
        return await self.board_repo.list_active(
            offset=pagination.offset,
            limit=pagination.page_size,
            sort_by=sort_by,
            descending=sort_order == SortOrder.DESC,
        )

    async def list_by_category(
        self,
        category: str,
        pagination: PaginationParams,
        sort_by: BoardSortField = BoardSortField.CREATED_AT,
        sort_order: SortOrder = SortOrder.DESC,
    ) -> tuple[list[Board], int]:
        return await self.board_repo.list_by_category(
            category,
            offset=pagination.offset,
            limit=pagination.page_size,
            sort_by=sort_by,
            descending=sort_order == SortOrder.DESC,
        )

    async def list_by_author(
        self,
        author_id: uuid.UUID,
        pagination: PaginationParams,
        sort_by: BoardSortField = BoardSortField.CREATED_AT,
        sort_order: SortOrder = SortOrder.DESC,
    ) -> tuple[list[Board], int]:
        """
        List boards written by one user.

        Raises:
            AppException: NOT_FOUND kind if no such user exists (boards are
                not queried in that case)
        """
        if not await self.user_repo.exists(author_id):
            raise AppException.not_found("User")

        return await self.board_repo.list_by_author(
            author_id,
            offset=pagination.offset,
            limit=pagination.page_size,
            sort_by=sort_by,
            descending=sort_order == SortOrder.DESC,
        )

    async def list_pinned(self) -> list[Board]:
        return await self.board_repo.list_pinned()

    async def list_popular(self, pagination: PaginationParams) -> tuple[list[Board], int]:
        return await self.board_repo.list_popular(
            offset=pagination.offset, limit=pagination.page_size
        )

    async def list_recent(self, pagination: PaginationParams) -> tuple[list[Board], int]:
        return await self.board_repo.list_active(
            offset=pagination.offset, limit=pagination.page_size
        )

    async def search_boards(
        self,
        pagination: PaginationParams,
        keyword: str | None = None,
        category: str | None = None,
        author_id: uuid.UUID | None = None,
    ) -> tuple[list[Board], int]:
        keyword = keyword.strip() if keyword else None
        return await self.board_repo.search(
            keyword=keyword or None,
            category=category,
            author_id=author_id,
            offset=pagination.offset,
            limit=pagination.page_size,
        )

    # -------------------------------------------------------------------------
    # Moderation
    # -------------------------------------------------------------------------

    async def update_board(
        self, board_id: uuid.UUID, data: BoardUpdate, current_user: User
    ) -> Board:
        """
        Update title, content or category of a board.

        Blank title/content values leave the stored value unchanged.

        Raises:
            AppException: NOT_FOUND, or AUTHORIZATION unless the caller is the
                author or privileged
        """
        board = await self._get_live_board(board_id)
        await self._require_modify(board, current_user, "update")

        if data.title is not None and data.title.strip():
            board.title = data.title.strip()
        if data.content is not None and data.content.strip():
            board.content = sanitize_html(data.content)
        if data.category is not None:
            board.category = data.category

        board = await self.board_repo.update(board)
        await self.session.commit()

        logger.info(f"Board updated: {board.id} by {current_user.username}")
        return board

    async def delete_board(self, board_id: uuid.UUID, current_user: User) -> None:
        """
        Soft delete a board.

        Raises:
            AppException: NOT_FOUND, or AUTHORIZATION unless the caller is the
                author or privileged
        """
        board = await self._get_live_board(board_id)
        await self._require_modify(board, current_user, "delete")

        await self.board_repo.soft_delete(board)
        await self.session.commit()

        logger.info(f"Board deleted: {board.id} by {current_user.username}")

    async def pin_board(self, board_id: uuid.UUID, current_user: User) -> Board:
        """Pin a board. Privileged callers only; checked before the lookup."""
        return await self._set_pinned(board_id, current_user, pinned=True)

    async def unpin_board(self, board_id: uuid.UUID, current_user: User) -> Board:
        """Unpin a board. Privileged callers only; checked before the lookup."""
        return await self._set_pinned(board_id, current_user, pinned=False)

    # -------------------------------------------------------------------------
    # Statistics
    # -------------------------------------------------------------------------

    async def get_statistics(self, now: datetime | None = None) -> BoardStatistics:
        """
        Aggregate board figures from count queries.

        Windows are computed from the current UTC time:
        - today: start of the current day to its last microsecond
        - week: the last seven days up to now
        """
        now = now or datetime.now(UTC)
        start_of_day = now.replace(hour=0, minute=0, second=0, microsecond=0)
        end_of_day = start_of_day + timedelta(days=1) - timedelta(microseconds=1)

        total = await self.board_repo.count()

        category_stats: dict[str, int] = {}
        for category, count in await self.board_repo.count_by_category():
            label = category if category is not None else UNCATEGORIZED_LABEL
            category_stats[label] = category_stats.get(label, 0) + count

        today = await self.board_repo.count_created_between(start_of_day, end_of_day)
        week = await self.board_repo.count_created_between(
            now - timedelta(days=STATISTICS_WEEK_DAYS), now
        )

        return BoardStatistics(
            total_boards=total,
            category_stats=category_stats,
            today_boards=today,
            week_boards=week,
        )

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    async def _get_live_board(self, board_id: uuid.UUID) -> Board:
        board = await self.board_repo.get_by_id(board_id)
        if board is None:
            logger.warning(f"Board not found: {board_id}")
            raise AppException.not_found("Board")
        return board

    async def _require_modify(self, board: Board, current_user: User, action: str) -> None:
        if not await self.permissions.can_modify_board(current_user, board):
            logger.warning(
                f"Board {action} refused: {current_user.username} is not the author "
                f"of {board.id}"
            )
            raise AppException.authorization(f"You do not have permission to {action} this board")

    async def _set_pinned(
        self, board_id: uuid.UUID, current_user: User, pinned: bool
    ) -> Board:
        await self.permissions.require_privileged(
            current_user, "Only administrators can pin or unpin boards"
        )

        board = await self._get_live_board(board_id)
        board.is_pinned = pinned
        board = await self.board_repo.update(board)
        await self.session.commit()

        logger.info(
            f"Board {'pinned' if pinned else 'unpinned'}: {board.id} by {current_user.username}"
        )
        return board
