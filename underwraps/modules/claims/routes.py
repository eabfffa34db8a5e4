from fastapi import APIRouter, Depends
from underwraps.database.supabase_client import get_supabase
from underwraps.modules.claims.schemas import ClaimCreate, ClaimCreateResponse, ClaimResponse
from underwraps.modules.claims.service import ClaimService
from underwraps.modules.groups.schemas import SuccessResponse
from underwraps.core.dependencies import RequestContext, get_request_context
from supabase import Client
from typing import List

router = APIRouter(prefix="/claims", tags=["claims"])


def get_claim_service(supabase: Client = Depends(get_supabase)) -> ClaimService:
    return ClaimService(supabase)


@router.post("", response_model=ClaimCreateResponse, status_code=201)
async def claim_item(
    data: ClaimCreate,
    ctx: RequestContext = Depends(get_request_context),
    service: ClaimService = Depends(get_claim_service)
):
    """Claim an item for the wishlist owner; hidden from them until the reveal date"""
    claim = service.claim_item(ctx, data)
    return ClaimCreateResponse(claim_id=claim.id)


@router.get("/mine", response_model=List[ClaimResponse])
async def list_my_claims(
    ctx: RequestContext = Depends(get_request_context),
    service: ClaimService = Depends(get_claim_service)
):
    """List the caller's own claims"""
    return service.list_my_claims(ctx)


@router.delete("/{claim_id}", response_model=SuccessResponse)
async def unclaim_item(
    claim_id: str,
    ctx: RequestContext = Depends(get_request_context),
    service: ClaimService = Depends(get_claim_service)
):
    """Remove your own claim"""
    service.unclaim_item(ctx, claim_id)
    return SuccessResponse()
