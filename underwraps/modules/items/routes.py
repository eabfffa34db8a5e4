from fastapi import APIRouter, Depends
from underwraps.database.supabase_client import get_supabase
from underwraps.modules.groups.schemas import SuccessResponse
from underwraps.modules.items.schemas import ItemCreate, ItemMutationResponse, ItemUpdate
from underwraps.modules.items.service import ItemService
from underwraps.core.dependencies import RequestContext, get_request_context
from supabase import Client

router = APIRouter(prefix="/items", tags=["items"])


def get_item_service(supabase: Client = Depends(get_supabase)) -> ItemService:
    return ItemService(supabase)


@router.post("", response_model=ItemMutationResponse, status_code=201)
async def add_item(
    data: ItemCreate,
    ctx: RequestContext = Depends(get_request_context),
    service: ItemService = Depends(get_item_service)
):
    """Add an item to your wishlist"""
    return ItemMutationResponse(item=service.add_item(ctx, data))


@router.put("/{item_id}", response_model=ItemMutationResponse)
async def edit_item(
    item_id: str,
    data: ItemUpdate,
    ctx: RequestContext = Depends(get_request_context),
    service: ItemService = Depends(get_item_service)
):
    """Edit an item on your wishlist"""
    return ItemMutationResponse(item=service.edit_item(ctx, item_id, data))


@router.delete("/{item_id}", response_model=SuccessResponse)
async def delete_item(
    item_id: str,
    ctx: RequestContext = Depends(get_request_context),
    service: ItemService = Depends(get_item_service)
):
    """Delete an item from your wishlist"""
    service.delete_item(ctx, item_id)
    return SuccessResponse()
