import logging
from typing import Any, Dict

from supabase import Client

from underwraps.config.settings import settings
from underwraps.core.dependencies import RequestContext
from underwraps.core.errors import Forbidden, Internal, InvalidInput, NotFound
from underwraps.core.validation import ensure_uuid
from underwraps.modules.items.schemas import ItemCreate, ItemFields, ItemResponse, ItemUpdate
from underwraps.modules.wishlists.service import WishlistService

logger = logging.getLogger(__name__)


class ItemService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.wishlists = WishlistService(supabase)

    def _fields(self, data: ItemFields) -> Dict[str, Any]:
        title = data.title.strip()
        if not title:
            raise InvalidInput("Title is required")
        return {
            "title": title,
            "url": (data.url or "").strip() or None,
            "price": data.price,
            "currency": (data.currency or "").strip().upper() or settings.default_currency,
            "image_url": (data.image_url or "").strip() or None,
            "note": data.note or None,
            "quantity": data.quantity,
            "allow_multiple_claims": data.allow_multiple_claims,
        }

    def _owned_wishlist(self, ctx: RequestContext, wishlist_id: str) -> Dict[str, Any]:
        wishlist = self.wishlists.get_wishlist_row(wishlist_id)
        if wishlist["user_id"] != ctx.user_id:
            raise Forbidden("You can only manage items on your own wishlists")
        return wishlist

    def get_item_row(self, item_id: str) -> Dict[str, Any]:
        ensure_uuid(item_id, "item ID")
        result = self.supabase.table("items")\
            .select("*")\
            .eq("id", item_id)\
            .limit(1)\
            .execute()
        if not result.data:
            raise NotFound("Item not found")
        return result.data[0]

    def add_item(self, ctx: RequestContext, data: ItemCreate) -> ItemResponse:
        """Add an item to one of the caller's wishlists"""
        fields = self._fields(data)
        self._owned_wishlist(ctx, data.wishlist_id)
        result = self.supabase.table("items").insert({
            "wishlist_id": data.wishlist_id,
            **fields,
        }).execute()
        if not result.data:
            raise Internal("Failed to add item")
        logger.info("Item %s added to wishlist %s", result.data[0]["id"], data.wishlist_id)
        return ItemResponse(**result.data[0])

    def edit_item(self, ctx: RequestContext, item_id: str, data: ItemUpdate) -> ItemResponse:
        """Replace an item's fields (wishlist owner only)"""
        fields = self._fields(data)
        item = self.get_item_row(item_id)
        self._owned_wishlist(ctx, item["wishlist_id"])
        result = self.supabase.table("items")\
            .update(fields)\
            .eq("id", item_id)\
            .execute()
        if not result.data:
            raise NotFound("Item not found")
        logger.info("Item %s updated by %s", item_id, ctx.user_id)
        return ItemResponse(**result.data[0])

    def delete_item(self, ctx: RequestContext, item_id: str) -> None:
        """Delete an item (wishlist owner only); its claims cascade"""
        item = self.get_item_row(item_id)
        self._owned_wishlist(ctx, item["wishlist_id"])
        self.supabase.table("items")\
            .delete()\
            .eq("id", item_id)\
            .execute()
        logger.info("Item %s deleted by %s", item_id, ctx.user_id)
