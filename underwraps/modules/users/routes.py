from fastapi import APIRouter, Depends
from underwraps.database.supabase_client import get_supabase, get_service_supabase
from underwraps.modules.auth.service import AuthService
from underwraps.modules.groups.schemas import SuccessResponse
from underwraps.modules.users.schemas import UserResponse
from underwraps.modules.users.service import UserService
from underwraps.core.dependencies import RequestContext, get_request_context
from supabase import Client
from typing import List

router = APIRouter(prefix="/users", tags=["users"])


def get_user_service(supabase: Client = Depends(get_supabase)) -> UserService:
    return UserService(supabase)


def get_admin_auth_service(service_supabase: Client = Depends(get_service_supabase)) -> AuthService:
    return AuthService(service_supabase)


@router.get("", response_model=List[UserResponse])
async def list_users(
    limit: int = 50,
    offset: int = 0,
    ctx: RequestContext = Depends(get_request_context),
    service: UserService = Depends(get_user_service)
):
    """List users sharing a group with the caller (all users for a global admin)"""
    return service.list_users(ctx, limit=limit, offset=offset)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: str,
    ctx: RequestContext = Depends(get_request_context),
    service: UserService = Depends(get_user_service)
):
    """Get user by ID (only if same user, shares a group, or global admin)"""
    return service.get_user(ctx, user_id)


@router.delete("/{user_id}", response_model=SuccessResponse)
async def delete_user(
    user_id: str,
    ctx: RequestContext = Depends(get_request_context),
    service: UserService = Depends(get_user_service),
    admin_auth: AuthService = Depends(get_admin_auth_service)
):
    """Delete a user account (global admin only, not yourself)"""
    service.delete_user(ctx, user_id, admin_auth)
    return SuccessResponse()
