"""
Role Pydantic schemas.
"""

import uuid

from pydantic import BaseModel, ConfigDict


class RoleResponse(BaseModel):
    """
    Role reference data.

    Lower priority values mean more privilege; the role with the lowest
    value is the administrator role.
    """

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    display_name: str
    description: str | None = None
    priority: int
