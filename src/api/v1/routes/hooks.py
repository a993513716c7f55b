"""Inbound host platform event hooks."""

from fastapi import APIRouter, Depends, Request

from api.dependencies.auth import SuperAdmin
from api.v1.dependencies import get_event_dispatcher, get_group_service
from api.v1.schemas.hooks import (
    DispatchResponse,
    TenantDeletedEvent,
    UserCreatedEvent,
    UserDeletedEvent,
)
from core.exceptions import TenantMismatchError
from core.rate_limit import WRITE_LIMIT, limiter
from domain.services.group_events import EventDispatcher
from domain.services.group_service import GroupService

router = APIRouter(
    prefix="/hooks",
    tags=["hooks"],
)


@router.post("/tenant-deleted", response_model=DispatchResponse, summary="Tenant deleted")
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def tenant_deleted(
    request: Request,
    body: TenantDeletedEvent,
    user: SuperAdmin,
    dispatcher: EventDispatcher = Depends(get_event_dispatcher),
) -> DispatchResponse:
    """Delete every group of the tenant."""
    failures = await dispatcher.tenant_deleted(body.tenant_id)
    return DispatchResponse(subscribers=len(dispatcher.subscribers), failures=failures)


@router.post("/user-deleted", response_model=DispatchResponse, summary="User deleted")
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def user_deleted(
    request: Request,
    body: UserDeletedEvent,
    user: SuperAdmin,
    dispatcher: EventDispatcher = Depends(get_event_dispatcher),
) -> DispatchResponse:
    """Drop the user's memberships before the host removes the record."""
    failures = await dispatcher.user_deleted(body.user_id)
    return DispatchResponse(subscribers=len(dispatcher.subscribers), failures=failures)


@router.post(
    "/user-created",
    response_model=DispatchResponse,
    summary="User created",
    responses={400: {"description": "User does not belong to the tenant"}},
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def user_created(
    request: Request,
    body: UserCreatedEvent,
    user: SuperAdmin,
    dispatcher: EventDispatcher = Depends(get_event_dispatcher),
    service: GroupService = Depends(get_group_service),
) -> DispatchResponse:
    """Optionally place the new user in the tenant's default group.

    An event naming a tenant the user does not belong to is rejected
    before dispatch.
    """
    if body.tenant_id:
        created = await service.get_user(body.user_id)
        if created.tenant_id != body.tenant_id:
            raise TenantMismatchError(created.id, body.tenant_id)
    failures = await dispatcher.user_created(body.user_id, body.tenant_id)
    return DispatchResponse(subscribers=len(dispatcher.subscribers), failures=failures)
