"""Group domain entities."""

from dataclasses import dataclass, field
from datetime import datetime

# Tenant id of custom (personal) groups, which are not bound to a tenant
NO_TENANT = 0

# Value of a user's current-group reference when the user has none
NO_GROUP = 0


@dataclass
class Group:
    """Domain entity for a user group.

    ``id`` stays 0 until the store assigns one on insert.
    """

    tenant_id: int
    name: str
    id: int = 0
    is_default: bool = False
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    @property
    def is_custom(self) -> bool:
        """Custom groups have no tenant and no default-group semantics."""
        return self.tenant_id == NO_TENANT


@dataclass
class GroupMembership:
    """Domain entity for a user's membership in a group."""

    group_id: int
    user_id: int
    created_at: datetime = field(default_factory=datetime.utcnow)
