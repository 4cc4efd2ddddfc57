"""
Role API routes.

Roles are seeded reference data; this router only lists them so that
administrators can pick role IDs for assignment.
"""

from fastapi import APIRouter, Depends

from api.dependencies import AdminUser, get_role_service
from schemas.common import ApiResponse
from schemas.role import RoleResponse
from services.role_service import RoleService

router = APIRouter(prefix="/roles", tags=["Roles"])


@router.get(
    "",
    response_model=ApiResponse[list[RoleResponse]],
    summary="List roles",
    description="All roles, most privileged (lowest priority value) first.",
)
async def list_roles(
    current_user: AdminUser,
    role_service: RoleService = Depends(get_role_service),
) -> ApiResponse[list[RoleResponse]]:
    roles = await role_service.list_roles()
    return ApiResponse.ok([RoleResponse.model_validate(role) for role in roles])
