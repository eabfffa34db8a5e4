from fastapi import APIRouter, Depends
from underwraps.database.supabase_client import get_supabase
from underwraps.modules.groups.schemas import (
    GroupCreate, GroupCreateResponse, GroupResponse, GroupMemberResponse, SuccessResponse
)
from underwraps.modules.groups.service import GroupService
from underwraps.core.dependencies import RequestContext, get_request_context
from supabase import Client
from typing import List

router = APIRouter(prefix="/groups", tags=["groups"])


def get_group_service(supabase: Client = Depends(get_supabase)) -> GroupService:
    return GroupService(supabase)


@router.post("", response_model=GroupCreateResponse, status_code=201)
async def create_group(
    group_data: GroupCreate,
    ctx: RequestContext = Depends(get_request_context),
    service: GroupService = Depends(get_group_service)
):
    """Create a new group; the caller becomes its owner"""
    group = service.create_group(group_data, ctx)
    return GroupCreateResponse(group=group)


@router.get("", response_model=List[GroupResponse])
async def list_groups(
    limit: int = 50,
    offset: int = 0,
    ctx: RequestContext = Depends(get_request_context),
    service: GroupService = Depends(get_group_service)
):
    """List groups the caller is a member of (all groups for a global admin)"""
    return service.list_groups(ctx, limit=limit, offset=offset)


@router.get("/{group_id}", response_model=GroupResponse)
async def get_group(
    group_id: str,
    ctx: RequestContext = Depends(get_request_context),
    service: GroupService = Depends(get_group_service)
):
    """Get group by ID (only if user is a member)"""
    return service.get_group(ctx, group_id)


@router.delete("/{group_id}", response_model=SuccessResponse)
async def delete_group(
    group_id: str,
    ctx: RequestContext = Depends(get_request_context),
    service: GroupService = Depends(get_group_service)
):
    """Delete group (owner or global admin)"""
    service.delete_group(ctx, group_id)
    return SuccessResponse()


@router.get("/{group_id}/members", response_model=List[GroupMemberResponse])
async def list_members(
    group_id: str,
    ctx: RequestContext = Depends(get_request_context),
    service: GroupService = Depends(get_group_service)
):
    """List all members of a group (only if user is a member)"""
    return service.list_members(ctx, group_id)


@router.delete("/{group_id}/members/{user_id}", response_model=SuccessResponse)
async def remove_member(
    group_id: str,
    user_id: str,
    ctx: RequestContext = Depends(get_request_context),
    service: GroupService = Depends(get_group_service)
):
    """Remove a member from the group (group admin, or the member themselves)"""
    service.remove_member(ctx, group_id, user_id)
    return SuccessResponse()
