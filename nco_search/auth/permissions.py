"""
Role and permission model shared by the route guards and /api/auth/me
"""

from enum import Enum
from typing import FrozenSet


class Role(str, Enum):
    ENUMERATOR = "ENUMERATOR"
    ADMIN = "ADMIN"
    PUBLIC = "PUBLIC"


# Roles a stored user account may carry
ACCOUNT_ROLES = (Role.ENUMERATOR.value, Role.ADMIN.value)

SEARCH = "search"
SELECT = "select"
VIEW_DETAILS = "view-details"
SAVE_SEARCH = "save-search"
OVERRIDE = "override"
MANAGE_SYNONYMS = "manage-synonyms"
VIEW_AUDIT_LOGS = "view-audit-logs"
VIEW_DASHBOARD = "view-dashboard"
MANAGE_USERS = "manage-users"

ALL_PERMISSIONS: FrozenSet[str] = frozenset({
    SEARCH, SELECT, VIEW_DETAILS, SAVE_SEARCH, OVERRIDE,
    MANAGE_SYNONYMS, VIEW_AUDIT_LOGS, VIEW_DASHBOARD, MANAGE_USERS,
})

ROLE_PERMISSIONS = {
    Role.PUBLIC: frozenset({SEARCH, VIEW_DETAILS}),
    Role.ENUMERATOR: frozenset({SEARCH, SELECT, VIEW_DETAILS, SAVE_SEARCH}),
    Role.ADMIN: ALL_PERMISSIONS,
}


def _as_role(role) -> Role:
    try:
        return Role(role)
    except ValueError:
        return Role.PUBLIC


def permissions_for(role) -> FrozenSet[str]:
    """Permission set for a role; unknown roles get the public set"""
    return ROLE_PERMISSIONS[_as_role(role)]


def has_permission(role, permission: str) -> bool:
    if _as_role(role) is Role.ADMIN:
        return True
    return permission in permissions_for(role)
