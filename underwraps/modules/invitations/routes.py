from fastapi import APIRouter, Depends, Request
from underwraps.config.settings import settings
from underwraps.database.supabase_client import get_supabase, get_service_supabase
from underwraps.modules.invitations.schemas import (
    InvitationAcceptResponse, InvitationCreate, InvitationCreateResponse,
    InvitationValidateRequest, InvitationValidateResponse
)
from underwraps.modules.invitations.service import InvitationService
from underwraps.core.dependencies import RequestContext, get_request_context
from underwraps.core.rate_limit import limiter
from supabase import Client

router = APIRouter(prefix="/invitations", tags=["invitations"])


def get_invitation_service(
    supabase: Client = Depends(get_supabase),
    service_supabase: Client = Depends(get_service_supabase)
) -> InvitationService:
    return InvitationService(supabase, service_supabase)


@router.post("", response_model=InvitationCreateResponse, status_code=201)
async def send_invitation(
    data: InvitationCreate,
    ctx: RequestContext = Depends(get_request_context),
    service: InvitationService = Depends(get_invitation_service)
):
    """Invite an email address to a group (group member)"""
    return service.send_invitation(ctx, data)


@router.post("/validate", response_model=InvitationValidateResponse)
@limiter.limit(settings.public_rate_limit)
async def validate_invitation(
    request: Request,
    data: InvitationValidateRequest,
    service: InvitationService = Depends(get_invitation_service)
):
    """Check an invitation token before sign-in (no auth required)"""
    return InvitationValidateResponse(invitation=service.validate_token(data.token))


@router.post("/{invitation_id}/accept", response_model=InvitationAcceptResponse)
async def accept_invitation(
    invitation_id: str,
    ctx: RequestContext = Depends(get_request_context),
    service: InvitationService = Depends(get_invitation_service)
):
    """Accept an invitation addressed to the caller's email; repeat accepts succeed"""
    return service.accept_invitation(ctx, invitation_id)
