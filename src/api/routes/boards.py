"""
Board API routes.

This module provides REST endpoints for:
- Creating, reading, updating and soft-deleting boards
- Listings (all or by category, by author, pinned, popular, recent)
- Keyword search
- Pinning (administrators only)
- Board statistics

All endpoints require a valid access token.
"""

import logging
import uuid

from fastapi import APIRouter, Depends, Query, status

from api.dependencies import CurrentUser, Pagination, get_board_service
from models.board import Board
from repositories.board_repository import BoardSortField
from schemas.board import (
    BoardCreate,
    BoardListItem,
    BoardResponse,
    BoardStatistics,
    BoardUpdate,
)
from schemas.common import ApiResponse, PaginatedResponse, PaginationParams, SortOrder
from services.board_service import BoardService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/boards", tags=["Boards"])


def _page(
    boards: list[Board], total: int, pagination: PaginationParams
) -> PaginatedResponse[BoardListItem]:
    items = [BoardListItem.model_validate(board) for board in boards]
    return PaginatedResponse[BoardListItem].build(items, total, pagination)


@router.post(
    "",
    response_model=ApiResponse[BoardResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create a board",
    description="Create a board written by the caller. Content is sanitized HTML.",
)
async def create_board(
    data: BoardCreate,
    current_user: CurrentUser,
    board_service: BoardService = Depends(get_board_service),
) -> ApiResponse[BoardResponse]:
    board = await board_service.create_board(data, current_user)
    return ApiResponse.ok(BoardResponse.model_validate(board), "Board created")


@router.get(
    "",
    response_model=ApiResponse[PaginatedResponse[BoardListItem]],
    summary="List boards",
    description="""
    List non-deleted boards.

    Query parameters:
        - category: Only boards in this category
        - page / page_size: Pagination (max 100 per page)
        - sort_by: created_at, updated_at, title, view_count
        - sort_order: asc or desc
    """,
)
async def list_boards(
    current_user: CurrentUser,
    pagination: Pagination,
    category: str | None = Query(default=None, max_length=50),
    sort_by: BoardSortField = Query(default=BoardSortField.CREATED_AT),
    sort_order: SortOrder = Query(default=SortOrder.DESC),
    board_service: BoardService = Depends(get_board_service),
) -> ApiResponse[PaginatedResponse[BoardListItem]]:
    if category:
        boards, total = await board_service.list_by_category(
            category, pagination, sort_by, sort_order
        )
    else:
        boards, total = await board_service.list_boards(pagination, sort_by, sort_order)
    return ApiResponse.ok(_page(boards, total, pagination))


@router.get(
    "/search",
    response_model=ApiResponse[PaginatedResponse[BoardListItem]],
    summary="Search boards",
    description="Case-insensitive keyword search over title, content and author name.",
)
async def search_boards(
    current_user: CurrentUser,
    pagination: Pagination,
    keyword: str | None = Query(default=None, max_length=100),
    category: str | None = Query(default=None, max_length=50),
    author_id: uuid.UUID | None = Query(default=None),
    board_service: BoardService = Depends(get_board_service),
) -> ApiResponse[PaginatedResponse[BoardListItem]]:
    boards, total = await board_service.search_boards(
        pagination, keyword=keyword, category=category, author_id=author_id
    )
    return ApiResponse.ok(_page(boards, total, pagination))


@router.get(
    "/pinned",
    response_model=ApiResponse[list[BoardListItem]],
    summary="Pinned boards",
)
async def list_pinned(
    current_user: CurrentUser,
    board_service: BoardService = Depends(get_board_service),
) -> ApiResponse[list[BoardListItem]]:
    boards = await board_service.list_pinned()
    return ApiResponse.ok([BoardListItem.model_validate(board) for board in boards])


@router.get(
    "/popular",
    response_model=ApiResponse[PaginatedResponse[BoardListItem]],
    summary="Most viewed boards",
)
async def list_popular(
    current_user: CurrentUser,
    pagination: Pagination,
    board_service: BoardService = Depends(get_board_service),
) -> ApiResponse[PaginatedResponse[BoardListItem]]:
    boards, total = await board_service.list_popular(pagination)
    return ApiResponse.ok(_page(boards, total, pagination))


@router.get(
    "/recent",
    response_model=ApiResponse[PaginatedResponse[BoardListItem]],
    summary="Most recent boards",
)
async def list_recent(
    current_user: CurrentUser,
    pagination: Pagination,
    board_service: BoardService = Depends(get_board_service),
) -> ApiResponse[PaginatedResponse[BoardListItem]]:
    boards, total = await board_service.list_recent(pagination)
    return ApiResponse.ok(_page(boards, total, pagination))


@router.get(
    "/statistics",
    response_model=ApiResponse[BoardStatistics],
    summary="Board statistics",
)
async def get_statistics(
    current_user: CurrentUser,
    board_service: BoardService = Depends(get_board_service),
) -> ApiResponse[BoardStatistics]:
    return ApiResponse.ok(await board_service.get_statistics())


@router.get(
    "/authors/{author_id}",
    response_model=ApiResponse[PaginatedResponse[BoardListItem]],
    summary="Boards by author",
)
async def list_by_author(
    author_id: uuid.UUID,
    current_user: CurrentUser,
    pagination: Pagination,
    sort_by: BoardSortField = Query(default=BoardSortField.CREATED_AT),
    sort_order: SortOrder = Query(default=SortOrder.DESC),
    board_service: BoardService = Depends(get_board_service),
) -> ApiResponse[PaginatedResponse[BoardListItem]]:
    boards, total = await board_service.list_by_author(
        author_id, pagination, sort_by, sort_order
    )
    return ApiResponse.ok(_page(boards, total, pagination))


@router.get(
    "/{board_id}",
    response_model=ApiResponse[BoardResponse],
    summary="Board detail",
    description="Returns the board and records one view.",
)
async def get_board(
    board_id: uuid.UUID,
    current_user: CurrentUser,
    board_service: BoardService = Depends(get_board_service),
) -> ApiResponse[BoardResponse]:
    board = await board_service.get_board(board_id)
    return ApiResponse.ok(BoardResponse.model_validate(board))


@router.put(
    "/{board_id}",
    response_model=ApiResponse[BoardResponse],
    summary="Update a board",
    description="Author or administrator only. Blank fields keep their stored value.",
)
async def update_board(
    board_id: uuid.UUID,
    data: BoardUpdate,
    current_user: CurrentUser,
    board_service: BoardService = Depends(get_board_service),
) -> ApiResponse[BoardResponse]:
    board = await board_service.update_board(board_id, data, current_user)
    return ApiResponse.ok(BoardResponse.model_validate(board), "Board updated")


@router.delete(
    "/{board_id}",
    response_model=ApiResponse[None],
    summary="Delete a board",
    description="Soft delete. Author or administrator only.",
)
async def delete_board(
    board_id: uuid.UUID,
    current_user: CurrentUser,
    board_service: BoardService = Depends(get_board_service),
) -> ApiResponse[None]:
    await board_service.delete_board(board_id, current_user)
    return ApiResponse.ok(message="Board deleted")


@router.put(
    "/{board_id}/pin",
    response_model=ApiResponse[BoardResponse],
    summary="Pin a board",
)
async def pin_board(
    board_id: uuid.UUID,
    current_user: CurrentUser,
    board_service: BoardService = Depends(get_board_service),
) -> ApiResponse[BoardResponse]:
    board = await board_service.pin_board(board_id, current_user)
    return ApiResponse.ok(BoardResponse.model_validate(board), "Board pinned")


@router.delete(
    "/{board_id}/pin",
    response_model=ApiResponse[BoardResponse],
    summary="Unpin a board",
)
async def unpin_board(
    board_id: uuid.UUID,
    current_user: CurrentUser,
    board_service: BoardService = Depends(get_board_service),
) -> ApiResponse[BoardResponse]:
    board = await board_service.unpin_board(board_id, current_user)
    return ApiResponse.ok(BoardResponse.model_validate(board), "Board unpinned")
