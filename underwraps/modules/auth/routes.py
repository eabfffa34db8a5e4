from fastapi import APIRouter, Depends
from underwraps.core.dependencies import RequestContext, get_request_context
from underwraps.modules.users.routes import get_user_service
from underwraps.modules.users.schemas import CurrentUserResponse
from underwraps.modules.users.service import UserService

router = APIRouter(prefix="/auth", tags=["auth"])


@router.get("/me", response_model=CurrentUserResponse)
async def get_current_user(
    ctx: RequestContext = Depends(get_request_context),
    service: UserService = Depends(get_user_service)
):
    """Get current authenticated user and their global-admin capability (for frontend UI)."""
    profile = service.get_profile(ctx.user_id) or {
        "id": ctx.user_id,
        "email": ctx.email or "",
        "name": ctx.display_name,
    }
    return CurrentUserResponse(**profile, is_global_admin=ctx.is_global_admin)
