"""Pydantic schemas for host event hooks."""

from pydantic import BaseModel, Field


class TenantDeletedEvent(BaseModel):
    """Host notification that a tenant was deleted."""

    tenant_id: int = Field(..., gt=0)


class UserDeletedEvent(BaseModel):
    """Host notification that a user is about to be deleted."""

    user_id: int = Field(..., gt=0)


class UserCreatedEvent(BaseModel):
    """Host notification that a user was created."""

    user_id: int = Field(..., gt=0)
    tenant_id: int = Field(0, ge=0)


class DispatchResponse(BaseModel):
    """Outcome of dispatching an event to the registered subscribers."""

    subscribers: int
    failures: int
