"""
Permission service for board moderation rules.

A caller is privileged when it holds the most privileged role in the role
table, i.e. the role with the lowest priority value (ROLE_ADMIN in the
seeded data). Privileged callers may pin boards and modify or delete boards
they did not write.

Usage:
    permission_service = PermissionService(session)
    if not await permission_service.can_modify_board(current_user, board):
        raise AppException.authorization(...)
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import AppException
from models.board import Board
from models.user import User
from repositories.role_repository import RoleRepository

logger = logging.getLogger(__name__)


class PermissionService:
    """Role-based checks used by BoardService and the admin dependencies."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.role_repo = RoleRepository(session)

    async def is_privileged(self, user: User) -> bool:
        """True if the user holds the highest-priority role."""
        top_role = await self.role_repo.get_highest_priority_role()
        if top_role is None:
            logger.error("No roles configured; privilege checks will always fail")
            return False
        return user.has_role(top_role.name)

    async def can_modify_board(self, user: User, board: Board) -> bool:
        """Authors may modify their own boards; privileged users may modify any."""
        if board.is_author(user.id):
            return True
        return await self.is_privileged(user)

    async def require_privileged(self, user: User, message: str | None = None) -> None:
        """
        Raise unless the user is privileged.

        Raises:
            AppException: AUTHORIZATION kind
        """
        if not await self.is_privileged(user):
            logger.warning(f"Privileged action refused for {user.username}")
            raise AppException.authorization(message)
