"""JWT authentication provider implementation.

Tokens are issued by the host platform and signed with a shared secret.

Payload structure:
    {
        "sub": "42",
        "email": "admin@example.com",
        "tenant_id": 5,
        "role": "tenant_admin",
        "exp": 1234567890
    }
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from jose import JWTError, jwt

from core.config import settings
from domain.entities.user import UserRole
from infrastructure.auth.provider import TokenUser

logger = logging.getLogger(__name__)


def parse_role(value: Any) -> UserRole:
    """Map a role claim (name or number) to a UserRole. Unknown values are anonymous."""
    if isinstance(value, str):
        try:
            return UserRole[value.upper()]
        except KeyError:
            pass
        if not value.isdigit():
            return UserRole.ANONYMOUS
        value = int(value)
    try:
        return UserRole(value)
    except ValueError:
        return UserRole.ANONYMOUS


class JWTAuthProvider:
    """JWT-based authentication provider."""

    def __init__(
        self,
        secret_key: str = settings.jwt_secret_key,
        algorithm: str = settings.jwt_algorithm,
        expire_minutes: int = settings.jwt_expire_minutes,
    ) -> None:
        self._secret_key = secret_key
        self._algorithm = algorithm
        self._expire_minutes = expire_minutes

    async def validate_token(self, token: str) -> Optional[TokenUser]:
        """
        Validate a JWT and extract the caller.

        Args:
            token: The JWT to validate

        Returns:
            TokenUser if valid, None if invalid or expired
        """
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self._algorithm],
                options={"verify_aud": False},
            )
        except JWTError as e:
            logger.debug("JWT validation failed: %s", e)
            return None

        sub = payload.get("sub")
        email = payload.get("email")
        if not sub or not email:
            return None

        try:
            user_id = int(sub)
            tenant_id = int(payload.get("tenant_id") or 0)
        except (TypeError, ValueError):
            return None

        return TokenUser(
            id=user_id,
            email=email,
            tenant_id=tenant_id,
            role=parse_role(payload.get("role", UserRole.NORMAL_USER.name)),
        )

    def create_token(self, user: TokenUser) -> str:
        """
        Create a JWT for a user (HS256, used by tests and local tooling).

        Args:
            user: The user to create a token for

        Returns:
            The generated JWT string
        """
        expire = datetime.now(timezone.utc) + timedelta(minutes=self._expire_minutes)

        payload: dict = {
            "sub": str(user.id),
            "email": user.email,
            "tenant_id": user.tenant_id,
            "role": user.role.name.lower(),
            "exp": expire,
        }

        return jwt.encode(payload, self._secret_key, algorithm=self._algorithm)
