"""
Claim visibility and claim/unclaim rules.

The wishlist owner only sees a claim once its reveal date has arrived (UTC);
until then the item looks unclaimed to them. Everyone else in the group sees
every claim so nobody buys the same gift twice, and a claimer always sees
their own claim.
"""

from datetime import date, datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Union

from underwraps.core.errors import Conflict, Forbidden, InvalidInput


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def parse_reveal_date(value: Union[str, date, None]) -> Optional[date]:
    if value is None or isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        return None


def is_revealed(claim: Dict[str, Any], today: date) -> bool:
    reveal = parse_reveal_date(claim.get("reveal_date"))
    return reveal is not None and today >= reveal


def is_claim_visible(claim: Dict[str, Any], viewer_id: str, is_owner_of_wishlist: bool, today: date) -> bool:
    if claim.get("claimer_id") == viewer_id:
        return True
    if not is_owner_of_wishlist:
        return True
    return is_revealed(claim, today)


def visible_claims(
    claims: Iterable[Dict[str, Any]],
    viewer_id: str,
    is_owner_of_wishlist: bool,
    today: Optional[date] = None,
) -> List[Dict[str, Any]]:
    today = today or utc_today()
    return [c for c in claims if is_claim_visible(c, viewer_id, is_owner_of_wishlist, today)]


def ensure_can_claim(
    item: Dict[str, Any],
    wishlist_owner_id: str,
    existing_claims: Iterable[Dict[str, Any]],
    claimer_id: str,
) -> None:
    if wishlist_owner_id == claimer_id:
        raise Forbidden("You cannot claim your own wishlist items")
    existing = list(existing_claims)
    if any(c.get("claimer_id") == claimer_id for c in existing):
        raise Conflict("You have already claimed this item", code="already_claimed")
    if existing and not item.get("allow_multiple_claims"):
        raise Conflict("This item has already been claimed", code="already_claimed")


def ensure_can_unclaim(claim: Dict[str, Any], actor_id: str) -> None:
    if claim.get("claimer_id") != actor_id:
        raise Forbidden("You can only unclaim items you claimed")


def ensure_future_reveal_date(reveal_date: date, today: Optional[date] = None) -> None:
    today = today or utc_today()
    if reveal_date <= today:
        raise InvalidInput("reveal_date must be after today")
