"""User domain entities.

Users are owned by the host platform's directory. This service only reads
them and writes the ``group_id`` extension field.
"""

from dataclasses import dataclass
from enum import IntEnum

from domain.entities.group import NO_GROUP


class UserRole(IntEnum):
    """Host platform role hierarchy. Higher value = more permissions.

    Use >= comparison for permission checks:
        user_role >= UserRole.TENANT_ADMIN  # True if TenantAdmin or SuperAdmin
    """

    ANONYMOUS = 0
    NORMAL_USER = 10
    TENANT_ADMIN = 20
    SUPER_ADMIN = 30


def has_permission(user_role: UserRole, required_role: UserRole) -> bool:
    """Check if a user role meets the required permission level."""
    return user_role >= required_role


@dataclass
class User:
    """Directory user as seen by the groups module."""

    id: int
    tenant_id: int
    public_id: str
    group_id: int = NO_GROUP

    @property
    def has_group(self) -> bool:
        return self.group_id != NO_GROUP
