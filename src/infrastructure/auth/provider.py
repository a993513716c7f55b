"""Caller identity carried by host-issued bearer tokens."""

from dataclasses import dataclass
from typing import Optional, Protocol

from domain.entities.user import UserRole


@dataclass
class TokenUser:
    """The calling user as the host platform describes it in the token.

    ``tenant_id`` is 0 for callers not bound to a tenant (super admins).
    """

    id: int
    email: str
    tenant_id: int = 0
    role: UserRole = UserRole.NORMAL_USER


class IAuthProvider(Protocol):
    """Verifies tokens the host platform signs for this service."""

    async def validate_token(self, token: str) -> Optional[TokenUser]:
        """Return the caller, or None when the signature or claims are bad."""
        ...

    def create_token(self, user: TokenUser) -> str:
        """Sign a token with the shared secret.

        The host normally issues tokens; this exists for local tooling and
        tests.
        """
        ...
