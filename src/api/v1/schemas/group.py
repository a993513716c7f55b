"""Pydantic schemas for Group API."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class GroupCreate(BaseModel):
    """Schema for creating a group."""

    name: str = Field(..., min_length=1, max_length=255)


class GroupUpdate(BaseModel):
    """Schema for renaming a group."""

    name: str = Field(..., min_length=1, max_length=255)


class GroupResponse(BaseModel):
    """Schema for Group response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    tenant_id: int
    name: str
    is_default: bool
    created_at: datetime
    updated_at: datetime


class GroupDetailResponse(BaseModel):
    """Schema for single Group response."""

    data: GroupResponse


class OptionalGroupResponse(BaseModel):
    """Schema for a lookup that may find no group."""

    data: GroupResponse | None = None


class GroupListResponse(BaseModel):
    """Schema for a page of Groups with the total match count."""

    count: int
    items: list[GroupResponse]


class GroupCreatedResponse(BaseModel):
    """Schema returned by CreateGroup."""

    id: int
    data: GroupResponse


class DeleteGroupsRequest(BaseModel):
    """Schema for deleting groups of a tenant."""

    group_ids: list[int] = Field(..., min_length=1)


class AffectedUsersResponse(BaseModel):
    """Users whose membership changed because of a deletion."""

    user_ids: list[int]


class ChangeDefaultGroupRequest(BaseModel):
    """Schema for changing the tenant's default group."""

    group_id: int = Field(..., gt=0)


class GroupUsersRequest(BaseModel):
    """Schema for adding users to, or removing users from, a group."""

    user_ids: list[int] = Field(..., min_length=1)


class SaveGroupsOfUserRequest(BaseModel):
    """Schema for replacing the set of groups a user belongs to."""

    group_ids: list[int] = Field(default_factory=list)


class UpdateUserGroupRequest(BaseModel):
    """Schema for setting a user's current group. 0 clears it."""

    group_id: int = Field(..., ge=0)


class GroupUserResponse(BaseModel):
    """Summary of a group member."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    tenant_id: int
    public_id: str
    group_id: int


class GroupUserListResponse(BaseModel):
    """Schema for list of group members."""

    data: list[GroupUserResponse]


class GroupNamesResponse(BaseModel):
    """Names of the groups a user belongs to."""

    data: list[str]


class ResultResponse(BaseModel):
    """Boolean result of a membership operation."""

    result: bool
