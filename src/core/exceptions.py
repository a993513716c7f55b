"""Custom exceptions and error codes."""

from enum import StrEnum
from typing import Any


class ErrorCode(StrEnum):
    """Standardized error codes for the API."""

    # Authentication errors (401)
    UNAUTHORIZED = "UNAUTHORIZED"
    INVALID_TOKEN = "INVALID_TOKEN"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"

    # Authorization errors (403)
    FORBIDDEN = "FORBIDDEN"
    INSUFFICIENT_PERMISSIONS = "INSUFFICIENT_PERMISSIONS"

    # Not found errors (404)
    GROUP_NOT_FOUND = "GROUP_NOT_FOUND"
    USER_NOT_FOUND = "USER_NOT_FOUND"

    # Validation errors (400)
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_INPUT_PARAMETER = "INVALID_INPUT_PARAMETER"
    TENANT_MISMATCH = "TENANT_MISMATCH"

    # Conflict errors (409)
    GROUP_ALREADY_EXISTS = "GROUP_ALREADY_EXISTS"
    CANNOT_DELETE_DEFAULT_GROUP = "CANNOT_DELETE_DEFAULT_GROUP"

    # Rate limiting (429)
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"

    # Server errors (500)
    INTERNAL_ERROR = "INTERNAL_ERROR"
    DATABASE_ERROR = "DATABASE_ERROR"


class AppException(Exception):
    """Base application exception."""

    def __init__(
        self,
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: Any | None = None,
    ) -> None:
        self.error_code = error_code
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)


class AuthenticationError(AppException):
    """Authentication failed."""

    def __init__(
        self,
        message: str = "Authentication required",
        error_code: ErrorCode = ErrorCode.UNAUTHORIZED,
    ) -> None:
        super().__init__(
            error_code=error_code,
            message=message,
            status_code=401,
        )


class AuthorizationError(AppException):
    """Authorization failed."""

    def __init__(self, message: str = "Access denied") -> None:
        super().__init__(
            error_code=ErrorCode.FORBIDDEN,
            message=message,
            status_code=403,
        )


class InsufficientPermissionsError(AppException):
    """Caller's role is below the one the operation requires."""

    def __init__(self, required_role: str = "tenant_admin") -> None:
        super().__init__(
            error_code=ErrorCode.INSUFFICIENT_PERMISSIONS,
            message=f"Insufficient permissions. Required role: {required_role}",
            status_code=403,
            details={"required_role": required_role},
        )


class InvalidInputParameterError(AppException):
    """Request is missing an identifier or carries an empty value."""

    def __init__(self, parameter: str) -> None:
        super().__init__(
            error_code=ErrorCode.INVALID_INPUT_PARAMETER,
            message=f"Invalid input parameter: {parameter}",
            status_code=400,
            details={"parameter": parameter},
        )


class TenantMismatchError(AppException):
    """A user is paired with a tenant other than its own."""

    def __init__(self, user_id: int, tenant_id: int) -> None:
        super().__init__(
            error_code=ErrorCode.TENANT_MISMATCH,
            message=f"User {user_id} does not belong to tenant {tenant_id}",
            status_code=400,
            details={"user_id": user_id, "tenant_id": tenant_id},
        )


class GroupNotFoundError(AppException):
    """Group not found."""

    def __init__(self, group_id: int) -> None:
        super().__init__(
            error_code=ErrorCode.GROUP_NOT_FOUND,
            message=f"Group not found: {group_id}",
            status_code=404,
            details={"group_id": group_id},
        )


class UserNotFoundError(AppException):
    """User not found in the directory."""

    def __init__(self, user_id: int) -> None:
        super().__init__(
            error_code=ErrorCode.USER_NOT_FOUND,
            message=f"User not found: {user_id}",
            status_code=404,
            details={"user_id": user_id},
        )


class GroupAlreadyExistsError(AppException):
    """A group with this name already exists in the tenant."""

    def __init__(self, tenant_id: int, name: str) -> None:
        super().__init__(
            error_code=ErrorCode.GROUP_ALREADY_EXISTS,
            message=f"Group already exists: {name}",
            status_code=409,
            details={"tenant_id": tenant_id, "name": name},
        )


class CannotDeleteDefaultGroupError(AppException):
    """The tenant's default group cannot be deleted."""

    def __init__(self, group_id: int) -> None:
        super().__init__(
            error_code=ErrorCode.CANNOT_DELETE_DEFAULT_GROUP,
            message="Cannot delete the default group of a tenant",
            status_code=409,
            details={"group_id": group_id},
        )


class StorageError(AppException):
    """The backing store failed to read or write."""

    def __init__(self, message: str = "Storage operation failed") -> None:
        super().__init__(
            error_code=ErrorCode.DATABASE_ERROR,
            message=message,
            status_code=500,
        )
