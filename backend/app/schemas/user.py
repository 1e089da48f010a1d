"""Admin-side user management schemas."""

from pydantic import BaseModel

from app.core.rbac import RoleType


class UserRoleUpdate(BaseModel):
    role: RoleType
