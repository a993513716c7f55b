"""Tenant-scoped group routes."""

from fastapi import APIRouter, Depends, Query, Request, status

from api.dependencies.auth import TenantAdmin, require_tenant_admin
from api.v1.dependencies import get_group_service
from api.v1.schemas.group import (
    AffectedUsersResponse,
    ChangeDefaultGroupRequest,
    DeleteGroupsRequest,
    GroupCreate,
    GroupCreatedResponse,
    GroupListResponse,
    GroupResponse,
    OptionalGroupResponse,
    ResultResponse,
)
from core.rate_limit import READ_LIMIT, WRITE_LIMIT, limiter
from domain.services.group_service import GroupService

router = APIRouter(
    prefix="/tenants/{tenant_id}",
    tags=["groups"],
)


@router.post(
    "/groups",
    response_model=GroupCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a group",
    responses={
        201: {"description": "Group created"},
        400: {"description": "Empty name"},
        403: {"description": "Insufficient permissions (tenant admin+)"},
        409: {"description": "A group with this name already exists in the tenant"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def create_group(
    request: Request,
    tenant_id: int,
    body: GroupCreate,
    user: TenantAdmin,
    service: GroupService = Depends(get_group_service),
) -> GroupCreatedResponse:
    """Create a group in a tenant (tenant 0 creates a custom group)."""
    require_tenant_admin(user, tenant_id)
    group = await service.create_group(tenant_id, body.name)
    return GroupCreatedResponse(id=group.id, data=GroupResponse.model_validate(group))


@router.get(
    "/groups",
    response_model=GroupListResponse,
    summary="List tenant groups",
    responses={
        200: {"description": "Page of groups with the total match count"},
        403: {"description": "Insufficient permissions (tenant admin+)"},
    },
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def list_groups(
    request: Request,
    tenant_id: int,
    user: TenantAdmin,
    offset: int = Query(0, ge=0),
    limit: int = Query(0, ge=0, description="0 returns every match"),
    search: str = Query("", max_length=255, description="Case-insensitive name substring"),
    service: GroupService = Depends(get_group_service),
) -> GroupListResponse:
    """Get a page of the tenant's groups ordered by name."""
    require_tenant_admin(user, tenant_id)
    count, groups = await service.get_groups(tenant_id, offset, limit, search)
    return GroupListResponse(
        count=count,
        items=[GroupResponse.model_validate(g) for g in groups],
    )


@router.post(
    "/groups/delete",
    response_model=AffectedUsersResponse,
    summary="Delete groups",
    responses={
        200: {"description": "Groups deleted; users moved to the default group"},
        403: {"description": "Insufficient permissions (tenant admin+)"},
        404: {"description": "Group not found in this tenant"},
        409: {"description": "The default group cannot be deleted"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def delete_groups(
    request: Request,
    tenant_id: int,
    body: DeleteGroupsRequest,
    user: TenantAdmin,
    service: GroupService = Depends(get_group_service),
) -> AffectedUsersResponse:
    """Delete groups of a tenant and return the users that were in them."""
    require_tenant_admin(user, tenant_id)
    user_ids = await service.delete_groups(tenant_id, body.group_ids)
    return AffectedUsersResponse(user_ids=user_ids)


@router.get(
    "/default-group",
    response_model=OptionalGroupResponse,
    summary="Get the default group",
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def get_default_group(
    request: Request,
    tenant_id: int,
    user: TenantAdmin,
    service: GroupService = Depends(get_group_service),
) -> OptionalGroupResponse:
    """Get the tenant's default group; ``data`` is null when the tenant has none."""
    require_tenant_admin(user, tenant_id)
    group = await service.get_default_group(tenant_id)
    return OptionalGroupResponse(data=GroupResponse.model_validate(group) if group else None)


@router.put(
    "/default-group",
    response_model=ResultResponse,
    summary="Change the default group",
    responses={
        200: {"description": "Default group changed"},
        403: {"description": "Insufficient permissions (tenant admin+)"},
        404: {"description": "Group not found in this tenant"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def change_default_group(
    request: Request,
    tenant_id: int,
    body: ChangeDefaultGroupRequest,
    user: TenantAdmin,
    service: GroupService = Depends(get_group_service),
) -> ResultResponse:
    """Make a group the tenant's only default group."""
    require_tenant_admin(user, tenant_id)
    result = await service.change_default_group(tenant_id, body.group_id)
    return ResultResponse(result=result)
