"""
Role service: read access to the role reference data.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from models.user import Role
from repositories.role_repository import RoleRepository


class RoleService:
    """Lists the roles an administrator can assign."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.role_repo = RoleRepository(session)

    async def list_roles(self) -> list[Role]:
        """All roles, most privileged first."""
        return await self.role_repo.list_all()
