from fastapi import APIRouter, Depends
from underwraps.database.supabase_client import get_supabase
from underwraps.modules.wishlists.schemas import (
    WishlistCreate, WishlistCreateResponse, WishlistDeleteResponse,
    WishlistDetailResponse, WishlistResponse
)
from underwraps.modules.wishlists.service import WishlistService
from underwraps.core.dependencies import RequestContext, get_request_context
from supabase import Client
from typing import List

router = APIRouter(prefix="/wishlists", tags=["wishlists"])


def get_wishlist_service(supabase: Client = Depends(get_supabase)) -> WishlistService:
    return WishlistService(supabase)


@router.post("", response_model=WishlistCreateResponse, status_code=201)
async def create_wishlist(
    data: WishlistCreate,
    ctx: RequestContext = Depends(get_request_context),
    service: WishlistService = Depends(get_wishlist_service)
):
    """Create a wishlist in a group (group member)"""
    return WishlistCreateResponse(wishlist=service.create_wishlist(ctx, data))


@router.get("", response_model=List[WishlistResponse])
async def list_wishlists(
    group_id: str,
    ctx: RequestContext = Depends(get_request_context),
    service: WishlistService = Depends(get_wishlist_service)
):
    """List the wishlists of a group (group member)"""
    return service.list_wishlists(ctx, group_id)


@router.get("/{wishlist_id}", response_model=WishlistDetailResponse)
async def get_wishlist(
    wishlist_id: str,
    ctx: RequestContext = Depends(get_request_context),
    service: WishlistService = Depends(get_wishlist_service)
):
    """Get a wishlist with its items and the claims visible to the caller"""
    return service.get_wishlist(ctx, wishlist_id)


@router.delete("/{wishlist_id}", response_model=WishlistDeleteResponse)
async def delete_wishlist(
    wishlist_id: str,
    ctx: RequestContext = Depends(get_request_context),
    service: WishlistService = Depends(get_wishlist_service)
):
    """Delete your own wishlist"""
    group_id = service.delete_wishlist(ctx, wishlist_id)
    return WishlistDeleteResponse(group_id=group_id)
