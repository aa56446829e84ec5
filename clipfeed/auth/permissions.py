"""Role-based access control (RBAC) for ClipFeed.

Hierarchical permission system:
- ADMINISTRATOR (level 2): Full access, including role escalation
- MODERATOR (level 1): Resolve reports, hide/unhide videos, ban accounts
- MEMBER (level 0): Upload, engage, report
"""

from enum import Enum


class AccountRole(str, Enum):
    """Account roles with hierarchical levels.

    Higher level = more permissions.
    """

    MEMBER = "member"
    MODERATOR = "moderator"
    ADMINISTRATOR = "administrator"


ROLE_HIERARCHY: dict[AccountRole, int] = {
    AccountRole.MEMBER: 0,
    AccountRole.MODERATOR: 1,
    AccountRole.ADMINISTRATOR: 2,
}


def get_role_level(role: AccountRole | str) -> int:
    """Get the permission level for a role.

    Args:
        role: AccountRole enum or string representation

    Returns:
        Permission level (0-2), defaults to 0 for unknown roles
    """
    if isinstance(role, str):
        try:
            role = AccountRole(role)
        except ValueError:
            return 0
    return ROLE_HIERARCHY.get(role, 0)


def has_permission(role: AccountRole | str, required_role: AccountRole | str) -> bool:
    """Check if a role has at least the required permission level.

    Examples:
        >>> has_permission(AccountRole.ADMINISTRATOR, AccountRole.MODERATOR)
        True
        >>> has_permission("member", "moderator")
        False
    """
    return get_role_level(role) >= get_role_level(required_role)


def is_administrator(role: AccountRole | str) -> bool:
    """Check if role is ADMINISTRATOR."""
    return get_role_level(role) == ROLE_HIERARCHY[AccountRole.ADMINISTRATOR]


def is_moderator(role: AccountRole | str) -> bool:
    """Check if role is MODERATOR or higher."""
    return has_permission(role, AccountRole.MODERATOR)
