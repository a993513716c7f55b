"""Authentication and role dependencies for FastAPI."""

from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from core.exceptions import AuthenticationError, ErrorCode, InsufficientPermissionsError
from domain.entities.group import NO_TENANT
from domain.entities.user import UserRole, has_permission
from infrastructure.auth.jwt_provider import JWTAuthProvider
from infrastructure.auth.provider import TokenUser

# Security scheme for OpenAPI docs
security = HTTPBearer(auto_error=False)

# Singleton auth provider
_auth_provider: JWTAuthProvider | None = None


def get_auth_provider() -> JWTAuthProvider:
    """Get or create the auth provider singleton."""
    global _auth_provider
    if _auth_provider is None:
        _auth_provider = JWTAuthProvider()
    return _auth_provider


async def get_current_user(
    credentials: Annotated[
        HTTPAuthorizationCredentials | None,
        Depends(security),
    ],
    auth_provider: JWTAuthProvider = Depends(get_auth_provider),
) -> TokenUser:
    """
    Dependency to get the current authenticated user.

    Raises:
        AuthenticationError: If no token provided or token is invalid
    """
    if not credentials:
        raise AuthenticationError(
            message="Authorization header required",
            error_code=ErrorCode.UNAUTHORIZED,
        )

    user = await auth_provider.validate_token(credentials.credentials)

    if not user:
        raise AuthenticationError(
            message="Invalid or expired token",
            error_code=ErrorCode.INVALID_TOKEN,
        )

    return user


# Type alias for convenience in route handlers
CurrentUser = Annotated[TokenUser, Depends(get_current_user)]


def require_role(user: TokenUser, required_role: UserRole) -> None:
    """Reject callers whose role is below ``required_role``."""
    if not has_permission(user.role, required_role):
        raise InsufficientPermissionsError(required_role.name.lower())


def require_tenant_admin(user: TokenUser, tenant_id: int) -> None:
    """Allow super admins anywhere and tenant admins inside their own tenant.

    Custom groups (tenant 0) are managed by super admins only.
    """
    require_role(user, UserRole.TENANT_ADMIN)
    if user.role >= UserRole.SUPER_ADMIN:
        return
    if tenant_id == NO_TENANT or tenant_id != user.tenant_id:
        raise InsufficientPermissionsError(UserRole.SUPER_ADMIN.name.lower())


def require_self_or_admin(user: TokenUser, user_id: int) -> None:
    """Normal users may only query themselves; admins anyone."""
    require_role(user, UserRole.NORMAL_USER)
    if user.id != user_id:
        require_role(user, UserRole.TENANT_ADMIN)


def get_tenant_admin(user: CurrentUser) -> TokenUser:
    """Dependency requiring at least the tenant admin role."""
    require_role(user, UserRole.TENANT_ADMIN)
    return user


def get_normal_user(user: CurrentUser) -> TokenUser:
    """Dependency requiring at least the normal user role."""
    require_role(user, UserRole.NORMAL_USER)
    return user


def get_super_admin(user: CurrentUser) -> TokenUser:
    """Dependency requiring the super admin role."""
    require_role(user, UserRole.SUPER_ADMIN)
    return user


TenantAdmin = Annotated[TokenUser, Depends(get_tenant_admin)]
NormalUser = Annotated[TokenUser, Depends(get_normal_user)]
SuperAdmin = Annotated[TokenUser, Depends(get_super_admin)]
