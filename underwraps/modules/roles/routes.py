from fastapi import APIRouter, Depends
from underwraps.database.supabase_client import get_supabase
from underwraps.modules.roles.schemas import RoleUpdate, RoleUpdateResponse
from underwraps.modules.roles.service import RoleService
from underwraps.core.dependencies import RequestContext, get_request_context
from supabase import Client

router = APIRouter(prefix="/roles", tags=["roles"])


def get_role_service(supabase: Client = Depends(get_supabase)) -> RoleService:
    return RoleService(supabase)


@router.put("", response_model=RoleUpdateResponse)
async def update_user_role(
    data: RoleUpdate,
    ctx: RequestContext = Depends(get_request_context),
    service: RoleService = Depends(get_role_service)
):
    """Set or clear a user's role in a group (group admin) or globally (global admin)"""
    return service.update_role(ctx, data)
