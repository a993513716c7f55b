"""Group API routes."""

from fastapi import APIRouter, Depends, Request

from api.dependencies.auth import NormalUser, TenantAdmin, require_tenant_admin
from api.v1.dependencies import get_group_service
from api.v1.schemas.group import (
    GroupDetailResponse,
    GroupResponse,
    GroupUpdate,
    GroupUserListResponse,
    GroupUserResponse,
    GroupUsersRequest,
    ResultResponse,
)
from core.exceptions import InsufficientPermissionsError
from core.rate_limit import READ_LIMIT, WRITE_LIMIT, limiter
from domain.entities.user import UserRole
from domain.services.group_service import GroupService
from infrastructure.auth.provider import TokenUser

router = APIRouter(
    prefix="/groups/{group_id}",
    tags=["groups"],
)


@router.get(
    "",
    response_model=GroupDetailResponse,
    summary="Get a group",
    responses={
        200: {"description": "Group"},
        403: {"description": "Group belongs to another tenant"},
        404: {"description": "Group not found"},
    },
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def get_group(
    request: Request,
    group_id: int,
    user: NormalUser,
    service: GroupService = Depends(get_group_service),
) -> GroupDetailResponse:
    """Get a group. Callers outside super admin see their own tenant only.

    Custom groups (tenant 0) are visible to super admins only.
    """
    group = await service.get_group(group_id)
    if user.role < UserRole.SUPER_ADMIN and (group.is_custom or group.tenant_id != user.tenant_id):
        raise InsufficientPermissionsError(UserRole.SUPER_ADMIN.name.lower())
    return GroupDetailResponse(data=GroupResponse.model_validate(group))


@router.patch(
    "",
    response_model=GroupDetailResponse,
    summary="Rename a group",
    responses={
        200: {"description": "Group renamed"},
        403: {"description": "Insufficient permissions (tenant admin+)"},
        404: {"description": "Group not found"},
        409: {"description": "A group with this name already exists in the tenant"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def update_group(
    request: Request,
    group_id: int,
    body: GroupUpdate,
    user: TenantAdmin,
    service: GroupService = Depends(get_group_service),
) -> GroupDetailResponse:
    """Rename a group."""
    await _require_group_admin(service, user, group_id)
    group = await service.update_group(group_id, body.name)
    return GroupDetailResponse(data=GroupResponse.model_validate(group))


# --- Group Member Management ---


@router.get(
    "/users",
    response_model=GroupUserListResponse,
    summary="List group users",
    responses={
        200: {"description": "Members ordered by public ID"},
        403: {"description": "Insufficient permissions (tenant admin+)"},
        404: {"description": "Group not found"},
    },
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def list_group_users(
    request: Request,
    group_id: int,
    user: TenantAdmin,
    service: GroupService = Depends(get_group_service),
) -> GroupUserListResponse:
    """Get all members of a group."""
    await _require_group_admin(service, user, group_id)
    users = await service.get_group_users(group_id)
    return GroupUserListResponse(data=[GroupUserResponse.model_validate(u) for u in users])


@router.post(
    "/users",
    response_model=ResultResponse,
    summary="Add users to a group",
    responses={
        200: {"description": "Users are members of the group"},
        400: {"description": "A user belongs to another tenant"},
        403: {"description": "Insufficient permissions (tenant admin+)"},
        404: {"description": "Group or user not found"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def add_to_group(
    request: Request,
    group_id: int,
    body: GroupUsersRequest,
    user: TenantAdmin,
    service: GroupService = Depends(get_group_service),
) -> ResultResponse:
    """Add users to a group. Existing members are left untouched."""
    await _require_group_admin(service, user, group_id)
    result = await service.add_to_group(group_id, body.user_ids)
    return ResultResponse(result=result)


@router.post(
    "/users/remove",
    response_model=ResultResponse,
    summary="Remove users from a group",
    responses={
        200: {"description": "Users removed"},
        403: {"description": "Insufficient permissions (tenant admin+)"},
        404: {"description": "Group not found"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def remove_users_from_group(
    request: Request,
    group_id: int,
    body: GroupUsersRequest,
    user: TenantAdmin,
    service: GroupService = Depends(get_group_service),
) -> ResultResponse:
    """Remove users from a group."""
    await _require_group_admin(service, user, group_id)
    result = await service.remove_users_from_group(group_id, body.user_ids)
    return ResultResponse(result=result)


async def _require_group_admin(service: GroupService, user: TokenUser, group_id: int) -> None:
    """Verify the caller administers the tenant that owns the group."""
    if user.role >= UserRole.SUPER_ADMIN:
        return
    group = await service.get_group(group_id)
    require_tenant_admin(user, group.tenant_id)
