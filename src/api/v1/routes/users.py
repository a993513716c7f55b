"""Per-user group membership routes."""

from fastapi import APIRouter, Depends, Request

from api.dependencies.auth import (
    NormalUser,
    TenantAdmin,
    require_self_or_admin,
    require_tenant_admin,
)
from api.v1.dependencies import get_group_service
from api.v1.schemas.group import (
    GroupNamesResponse,
    GroupResponse,
    OptionalGroupResponse,
    ResultResponse,
    SaveGroupsOfUserRequest,
    UpdateUserGroupRequest,
)
from core.rate_limit import READ_LIMIT, WRITE_LIMIT, limiter
from domain.entities.user import UserRole
from domain.services.group_service import GroupService
from infrastructure.auth.provider import TokenUser

router = APIRouter(
    prefix="/users/{user_id}",
    tags=["group-users"],
)


@router.get(
    "/groups",
    response_model=list[GroupResponse],
    summary="List a user's groups",
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def get_groups_of_user(
    request: Request,
    user_id: int,
    user: NormalUser,
    service: GroupService = Depends(get_group_service),
) -> list[GroupResponse]:
    """Get all groups a user belongs to. Normal users may only ask about themselves."""
    await _require_user_access(service, user, user_id)
    groups = await service.get_groups_of_user(user_id)
    return [GroupResponse.model_validate(g) for g in groups]


@router.get(
    "/group-names",
    response_model=GroupNamesResponse,
    summary="List a user's group names",
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def get_group_names_of_user(
    request: Request,
    user_id: int,
    user: NormalUser,
    service: GroupService = Depends(get_group_service),
) -> GroupNamesResponse:
    """Get the names of all groups a user belongs to."""
    await _require_user_access(service, user, user_id)
    names = await service.get_group_names_of_user(user_id)
    return GroupNamesResponse(data=names)


@router.get(
    "/group",
    response_model=OptionalGroupResponse,
    summary="Get a user's current group",
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def get_user_group(
    request: Request,
    user_id: int,
    user: NormalUser,
    service: GroupService = Depends(get_group_service),
) -> OptionalGroupResponse:
    """Get the user's current group; ``data`` is null when the user has none."""
    await _require_user_access(service, user, user_id)
    group = await service.get_user_group(user_id)
    return OptionalGroupResponse(data=GroupResponse.model_validate(group) if group else None)


@router.put(
    "/groups",
    response_model=ResultResponse,
    summary="Replace a user's groups",
    responses={
        200: {"description": "Memberships reconciled"},
        400: {"description": "A group belongs to another tenant"},
        403: {"description": "Insufficient permissions (tenant admin+)"},
        404: {"description": "User or group not found"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def save_groups_of_user(
    request: Request,
    user_id: int,
    body: SaveGroupsOfUserRequest,
    user: TenantAdmin,
    service: GroupService = Depends(get_group_service),
) -> ResultResponse:
    """Make the given groups exactly the set of groups the user belongs to."""
    await _require_user_access(service, user, user_id, admin_only=True)
    result = await service.save_groups_of_user(user_id, body.group_ids)
    return ResultResponse(result=result)


@router.put(
    "/group",
    response_model=ResultResponse,
    summary="Set a user's current group",
    responses={
        200: {"description": "Current group updated"},
        400: {"description": "The group belongs to another tenant"},
        403: {"description": "Insufficient permissions (tenant admin+)"},
        404: {"description": "User or group not found"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def update_user_group(
    request: Request,
    user_id: int,
    body: UpdateUserGroupRequest,
    user: TenantAdmin,
    service: GroupService = Depends(get_group_service),
) -> ResultResponse:
    """Overwrite the user's current group (0 clears it)."""
    await _require_user_access(service, user, user_id, admin_only=True)
    result = await service.update_user_group(user_id, body.group_id)
    return ResultResponse(result=result)


async def _require_user_access(
    service: GroupService,
    caller: TokenUser,
    user_id: int,
    admin_only: bool = False,
) -> None:
    """Self access for normal users; admins only within their tenant."""
    if not admin_only:
        require_self_or_admin(caller, user_id)
        if caller.id == user_id:
            return
    if caller.role >= UserRole.SUPER_ADMIN:
        return
    target = await service.get_user(user_id)
    require_tenant_admin(caller, target.tenant_id)
