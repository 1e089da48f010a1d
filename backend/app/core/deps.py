"""Dependency injection: auth middleware and RBAC enforcement."""

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.rbac import PermissionAction, RoleType, STAFF_ROLES, has_permission
from app.core.security import InvalidTokenError, decode_access_token
from app.db.base import get_db
from app.models.user import User

bearer_scheme = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Verify the bearer token and load the user it names.

    The user is re-read on every request so role changes and deleted
    accounts take effect immediately instead of when the token expires.
    """
    if credentials is None or not credentials.credentials:
        raise _unauthorized("No token")

    try:
        payload = decode_access_token(credentials.credentials)
    except InvalidTokenError:
        raise _unauthorized("Invalid or expired token")

    user = await db.get(User, payload["sub"])
    if user is None:
        raise _unauthorized("User not found")
    return user


def require_role(*allowed_roles: RoleType):
    """Dependency factory: checks the user has one of the allowed roles."""

    async def checker(user: User = Depends(get_current_user)) -> User:
        if user.role not in allowed_roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Access denied",
            )
        return user

    return checker


def require_permission(*required: PermissionAction):
    """Dependency factory: checks the user's role carries ALL required permissions."""

    async def checker(user: User = Depends(get_current_user)) -> User:
        missing = [p.value for p in required if not has_permission(user.role, p)]
        if missing:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Missing permissions: {', '.join(missing)}",
            )
        return user

    return checker


require_admin = require_role(RoleType.ADMIN)
require_staff = require_role(*STAFF_ROLES)
