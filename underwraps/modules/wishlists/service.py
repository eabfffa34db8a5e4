import logging
from typing import Any, Dict, List, Set

from supabase import Client

from underwraps.config.settings import settings
from underwraps.core.dependencies import RequestContext
from underwraps.core.errors import Conflict, Forbidden, Internal, NotFound, is_unique_violation
from underwraps.core.validation import ensure_uuid, sanitize_name
from underwraps.modules.claims.visibility import utc_today, visible_claims
from underwraps.modules.groups.guard import GroupAction, require_group_action
from underwraps.modules.wishlists.naming import default_base_name, next_default_name
from underwraps.modules.wishlists.schemas import (
    ClaimView, ItemWithClaims, WishlistCreate, WishlistDetailResponse, WishlistResponse
)

logger = logging.getLogger(__name__)


class WishlistService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_wishlist_row(self, wishlist_id: str) -> Dict[str, Any]:
        ensure_uuid(wishlist_id, "wishlist ID")
        result = self.supabase.table("wishlists")\
            .select("*")\
            .eq("id", wishlist_id)\
            .limit(1)\
            .execute()
        if not result.data:
            raise NotFound("Wishlist not found")
        return result.data[0]

    def _existing_names(self, user_id: str, group_id: str) -> Set[str]:
        result = self.supabase.table("wishlists")\
            .select("name")\
            .eq("user_id", user_id)\
            .eq("group_id", group_id)\
            .execute()
        return {w["name"] for w in result.data or []}

    def _insert(self, user_id: str, group_id: str, name: str, is_default: bool) -> WishlistResponse:
        result = self.supabase.table("wishlists").insert({
            "user_id": user_id,
            "group_id": group_id,
            "name": name,
            "is_default": is_default,
        }).execute()
        if not result.data:
            raise Internal("Failed to create wishlist")
        return WishlistResponse(**result.data[0])

    def create_wishlist(self, ctx: RequestContext, data: WishlistCreate) -> WishlistResponse:
        """Create a wishlist. A chosen name must be free; without one the next default name is used."""
        ensure_uuid(data.group_id, "group ID")
        require_group_action(self.supabase, ctx, data.group_id, GroupAction.CREATE_WISHLIST)

        existing = self._existing_names(ctx.user_id, data.group_id)
        name = sanitize_name(data.name) if data.name else ""
        if name:
            duplicate = Conflict(
                f'You already have a wishlist named "{name}" in this group', code="duplicate_name"
            )
            if name in existing:
                raise duplicate
            try:
                wishlist = self._insert(ctx.user_id, data.group_id, name, not existing)
            except Exception as e:
                if is_unique_violation(e):
                    raise duplicate
                raise
            logger.info("Wishlist %s created in group %s by %s", wishlist.id, data.group_id, ctx.user_id)
            return wishlist

        base = default_base_name(ctx.display_name)
        for attempt in range(1, settings.wishlist_name_max_attempts + 1):
            candidate = next_default_name(base, existing)
            try:
                wishlist = self._insert(ctx.user_id, data.group_id, candidate, not existing)
            except Exception as e:
                if not is_unique_violation(e):
                    raise
                logger.warning("Wishlist name %r taken on attempt %d, regenerating", candidate, attempt)
                existing = self._existing_names(ctx.user_id, data.group_id)
                continue
            logger.info("Wishlist %s created in group %s by %s", wishlist.id, data.group_id, ctx.user_id)
            return wishlist

        raise Conflict(
            "Could not create wishlist due to concurrent requests. Please try again.",
            code="name_contention",
        )

    def list_wishlists(self, ctx: RequestContext, group_id: str) -> List[WishlistResponse]:
        ensure_uuid(group_id, "group ID")
        require_group_action(self.supabase, ctx, group_id, GroupAction.VIEW)
        result = self.supabase.table("wishlists")\
            .select("*")\
            .eq("group_id", group_id)\
            .order("created_at")\
            .execute()
        return [WishlistResponse(**w) for w in result.data or []]

    def get_wishlist(self, ctx: RequestContext, wishlist_id: str) -> WishlistDetailResponse:
        """Wishlist with its items; claims are filtered for the viewer before they leave the service."""
        wishlist = self.get_wishlist_row(wishlist_id)
        require_group_action(self.supabase, ctx, wishlist["group_id"], GroupAction.VIEW)
        is_owner = wishlist["user_id"] == ctx.user_id

        items_result = self.supabase.table("items")\
            .select("*")\
            .eq("wishlist_id", wishlist_id)\
            .order("created_at")\
            .execute()
        items = items_result.data or []

        claims_by_item: Dict[str, List[Dict[str, Any]]] = {}
        if items:
            claims_result = self.supabase.table("item_claims")\
                .select("*")\
                .in_("item_id", [item["id"] for item in items])\
                .execute()
            today = utc_today()
            for claim in visible_claims(claims_result.data or [], ctx.user_id, is_owner, today):
                claims_by_item.setdefault(claim["item_id"], []).append(claim)

        detailed = []
        for item in items:
            claims = [ClaimView(**c) for c in claims_by_item.get(item["id"], [])]
            detailed.append(ItemWithClaims(**item, is_claimed=bool(claims), claims=claims))
        return WishlistDetailResponse(**wishlist, is_owner=is_owner, items=detailed)

    def delete_wishlist(self, ctx: RequestContext, wishlist_id: str) -> str:
        """Delete own wishlist; items and claims cascade. Returns the group id."""
        wishlist = self.get_wishlist_row(wishlist_id)
        if wishlist["user_id"] != ctx.user_id:
            raise Forbidden("You can only delete your own wishlists")
        self.supabase.table("wishlists")\
            .delete()\
            .eq("id", wishlist_id)\
            .execute()
        logger.info("Wishlist %s deleted by %s", wishlist_id, ctx.user_id)
        return wishlist["group_id"]
