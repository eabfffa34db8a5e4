import logging
from typing import Any, Dict, List

from supabase import Client

from underwraps.core.dependencies import RequestContext
from underwraps.core.errors import Conflict, Forbidden, Internal, NotFound, is_unique_violation
from underwraps.core.validation import ensure_uuid
from underwraps.modules.claims.schemas import ClaimCreate, ClaimResponse
from underwraps.modules.claims.visibility import (
    ensure_can_claim, ensure_can_unclaim, ensure_future_reveal_date
)
from underwraps.modules.groups.guard import load_group_facts
from underwraps.modules.items.service import ItemService

logger = logging.getLogger(__name__)


class ClaimService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.items = ItemService(supabase)

    def _claims_for_item(self, item_id: str) -> List[Dict[str, Any]]:
        result = self.supabase.table("item_claims")\
            .select("*")\
            .eq("item_id", item_id)\
            .order("created_at")\
            .order("id")\
            .execute()
        return result.data or []

    def claim_item(self, ctx: RequestContext, data: ClaimCreate) -> ClaimResponse:
        """Claim an item on someone else's wishlist in a group the caller belongs to"""
        ensure_uuid(data.item_id, "item ID")
        if data.group_id is not None:
            ensure_uuid(data.group_id, "group ID")
        ensure_future_reveal_date(data.reveal_date)

        item = self.items.get_item_row(data.item_id)
        wishlist = self.items.wishlists.get_wishlist_row(item["wishlist_id"])
        group_id = wishlist["group_id"]
        if data.group_id is not None and data.group_id != group_id:
            raise Forbidden("Item does not belong to this group")
        facts = load_group_facts(self.supabase, group_id, ctx.user_id)
        if not facts.is_member:
            raise Forbidden("You must be a member of this group to claim items")

        ensure_can_claim(item, wishlist["user_id"], self._claims_for_item(item["id"]), ctx.user_id)

        try:
            result = self.supabase.table("item_claims").insert({
                "item_id": item["id"],
                "claimer_id": ctx.user_id,
                "group_id": group_id,
                "reveal_date": data.reveal_date.isoformat(),
                "note": data.note or None,
            }).execute()
        except Exception as e:
            if is_unique_violation(e):
                raise Conflict("You have already claimed this item", code="already_claimed")
            raise
        if not result.data:
            raise Internal("Failed to claim item")
        claim = result.data[0]

        if not item.get("allow_multiple_claims"):
            self._resolve_single_claim_race(item["id"], claim["id"])

        logger.info("Item %s claimed (claim %s)", item["id"], claim["id"])
        return ClaimResponse(**claim)

    def _resolve_single_claim_race(self, item_id: str, claim_id: str) -> None:
        """The earliest claim wins (lowest id on a timestamp tie); a later concurrent claim is withdrawn."""
        """The earliest claim wins; a later concurrent claim is withdrawn."""
        claims = self._claims_for_item(item_id)
        if claims and claims[0]["id"] != claim_id:
            self.supabase.table("item_claims").delete().eq("id", claim_id).execute()
            logger.warning("Concurrent claim %s on single-claim item %s withdrawn", claim_id, item_id)
            raise Conflict("This item has already been claimed", code="already_claimed")

    def unclaim_item(self, ctx: RequestContext, claim_id: str) -> None:
        """Delete a claim; only its claimer may do so"""
        ensure_uuid(claim_id, "claim ID")
        result = self.supabase.table("item_claims")\
            .select("*")\
            .eq("id", claim_id)\
            .limit(1)\
            .execute()
        if not result.data:
            raise NotFound("Claim not found")
        ensure_can_unclaim(result.data[0], ctx.user_id)
        self.supabase.table("item_claims")\
            .delete()\
            .eq("id", claim_id)\
            .execute()
        logger.info("Claim %s removed by its claimer", claim_id)

    def list_my_claims(self, ctx: RequestContext) -> List[ClaimResponse]:
        result = self.supabase.table("item_claims")\
            .select("*")\
            .eq("claimer_id", ctx.user_id)\
            .order("created_at", desc=True)\
            .execute()
        return [ClaimResponse(**c) for c in result.data or []]
