"""
Role repository for role-based access control operations.

Roles are reference data; this repository only reads them.
"""

import uuid
from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models.user import Role
from repositories.base import BaseRepository


class RoleRepository(BaseRepository[Role]):
    """
    Repository for Role model operations.

    Extends BaseRepository with role-specific queries:
    - Role name lookups (default role at registration)
    - Highest-priority role (privilege checks)
    - Listing and bulk lookups (role assignment)
    """

    def __init__(self, session: AsyncSession):
        super().__init__(Role, session)

    async def get_by_name(self, name: str) -> Role | None:
        """
        Get role by name.

        Args:
            name: Role name to search for (e.g., "ROLE_USER")

        Returns:
            Role instance or None if not found

        Example:
            default_role = await role_repo.get_by_name(settings.default_role_name)
            if default_role is None:
                raise AppException.internal()
        """
        query = select(Role).where(Role.name == name)
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def get_highest_priority_role(self) -> Role | None:
        """
        Get the most privileged role (lowest priority value).

        Ties are broken by name so the answer is stable.
        """
        query = select(Role).order_by(Role.priority.asc(), Role.name.asc()).limit(1)
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def list_all(self) -> list[Role]:
        """All roles, most privileged first."""
        query = select(Role).order_by(Role.priority.asc(), Role.name.asc())
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def get_by_ids(self, role_ids: Iterable[uuid.UUID]) -> list[Role]:
        """
        Get the roles matching the given IDs.

        Unknown IDs are skipped; callers compare the result against the
        requested IDs.
        """
        query = (
            select(Role)
            .where(Role.id.in_(list(role_ids)))
            .order_by(Role.priority.asc(), Role.name.asc())
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())
