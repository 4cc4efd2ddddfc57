"""
Board (bulletin post) model.

A board is written by one user, carries sanitized HTML content and an
optional category label, and is soft-deleted rather than removed.

Invariants:
- author_id is set at creation and never changes
- view_count only grows, through BoardRepository.increment_view_count
- soft-deleted boards are excluded from every standard query
"""

import uuid
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Boolean, CheckConstraint, ForeignKey, Integer, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from models.base import Base
from models.mixins import SoftDeleteMixin, TimestampMixin

if TYPE_CHECKING:
    from models.user import User


class Board(Base, TimestampMixin, SoftDeleteMixin):
    """
    Board post.

    Attributes:
        id: UUID primary key
        title: Post title (max 200 characters)
        content: Sanitized HTML body
        category: Optional category label (e.g. FREE, NOTICE)
        author_id: Writer of the post
        view_count: Number of detail views
        is_pinned: Shown on top of listings (privileged users only)
        created_at / updated_at / deleted_at: from mixins
    """

    __tablename__ = "boards"

    title: Mapped[str] = mapped_column(String(200), nullable=False)

    content: Mapped[str] = mapped_column(Text, nullable=False)

    category: Mapped[Optional[str]] = mapped_column(
        String(50),
        nullable=True,
        index=True,
    )

    author_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    view_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    is_pinned: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        index=True,
    )

    # Relationships
    author: Mapped["User"] = relationship(
        "User",
        foreign_keys=[author_id],
        lazy="selectin",
    )

    __table_args__ = (
        CheckConstraint("view_count >= 0", name="view_count_non_negative"),
    )

    def is_author(self, user_id: uuid.UUID) -> bool:
        return self.author_id == user_id

    def __repr__(self) -> str:
        return f"Board(id={self.id}, title={self.title!r}, author_id={self.author_id})"
