"""
Board Pydantic schemas for API request/response handling.

This module provides:
- Board create and update schemas
- Board detail and list item responses
- Board statistics response
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from schemas.user import UserEmbedded


class BoardCreate(BaseModel):
    """
    Schema for creating a board post.

    Blank title or content is rejected by the service with a field-level
    validation failure, so the schema only bounds lengths.

    Attributes:
        title: Post title
        content: HTML body (sanitized before storage)
        category: Optional category label (e.g. FREE, NOTICE)
    """

    title: str = Field(max_length=200, description="Post title")
    content: str = Field(description="HTML content")
    category: str | None = Field(default=None, max_length=50, description="Category label")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Quarterly planning notes",
                "content": "<p>Agenda attached.</p>",
                "category": "NOTICE",
            }
        }
    )


class BoardUpdate(BaseModel):
    """
    Schema for updating a board post.

    Omitted or blank title/content keep their stored value; an omitted
    category keeps its stored value.
    """

    title: str | None = Field(default=None, max_length=200)
    content: str | None = None
    category: str | None = Field(default=None, max_length=50)


class BoardResponse(BaseModel):
    """
    Full board view.

    Attributes:
        id: Board ID
        title: Post title
        content: Sanitized HTML
        category: Category label
        author: Writer summary
        view_count: Detail views recorded before this response
        is_pinned: Pinned on top of listings
        created_at / updated_at: Timestamps
    """

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    title: str
    content: str
    category: str | None = None
    author: UserEmbedded
    view_count: int
    is_pinned: bool
    created_at: datetime
    updated_at: datetime


class BoardListItem(BaseModel):
    """Board summary for list views (no content)."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    title: str
    category: str | None = None
    author: UserEmbedded
    view_count: int
    is_pinned: bool
    created_at: datetime


class BoardStatistics(BaseModel):
    """
    Aggregate board figures.

    Attributes:
        total_boards: Non-deleted boards
        category_stats: Count per category; boards without one are
            counted under "uncategorized"
        today_boards: Boards created during the current UTC day
        week_boards: Boards created in the last seven days
    """

    total_boards: int
    category_stats: dict[str, int]
    today_boards: int
    week_boards: int
