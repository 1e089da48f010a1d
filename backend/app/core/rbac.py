"""Roles and capabilities.

RBAC Matrix:
┌─────────────────────┬───────┬───────────┬──────┐
│ Permission          │ Admin │ Assistant │ User │
├─────────────────────┼───────┼───────────┼──────┤
│ product:create      │  ✓    │    ✓      │      │
│ product:update      │  ✓    │    ✓      │      │
│ product:delete      │  ✓    │    ✓      │      │
│ order:read_all      │  ✓    │           │      │
│ order:delete        │  ✓    │           │      │
│ user:read           │  ✓    │           │      │
│ user:update         │  ✓    │           │      │
│ user:delete         │  ✓    │           │      │
└─────────────────────┴───────┴───────────┴──────┘

Every role may browse the catalog, check out, and manage its own profile
and orders; those need no entry here.
"""

import enum


class RoleType(str, enum.Enum):
    USER = "user"
    ASSISTANT = "assistant"
    ADMIN = "admin"


class PermissionAction(str, enum.Enum):
    # Products
    PRODUCT_CREATE = "product:create"
    PRODUCT_UPDATE = "product:update"
    PRODUCT_DELETE = "product:delete"
    # Orders
    ORDER_READ_ALL = "order:read_all"
    ORDER_DELETE = "order:delete"
    # Users
    USER_READ = "user:read"
    USER_UPDATE = "user:update"
    USER_DELETE = "user:delete"


STAFF_ROLES: tuple[RoleType, ...] = (RoleType.ADMIN, RoleType.ASSISTANT)

ROLE_PERMISSIONS: dict[RoleType, frozenset[PermissionAction]] = {
    RoleType.ADMIN: frozenset(PermissionAction),  # All permissions
    RoleType.ASSISTANT: frozenset(
        {
            PermissionAction.PRODUCT_CREATE,
            PermissionAction.PRODUCT_UPDATE,
            PermissionAction.PRODUCT_DELETE,
        }
    ),
    RoleType.USER: frozenset(),
}


def has_permission(role: RoleType | str, action: PermissionAction) -> bool:
    """True when ``role`` carries ``action``. Unknown role names carry nothing."""
    try:
        role = RoleType(role)
    except ValueError:
        return False
    return action in ROLE_PERMISSIONS[role]
