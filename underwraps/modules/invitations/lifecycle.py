"""
Invitation state machine.

    pending --accept--> accepted      (terminal)
    pending --now > expires_at--> expired   (derived, never stored)

Expiry always wins over a stored "pending" status.
"""

import uuid
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Dict, Optional, Union

from underwraps.core.errors import Conflict, Forbidden, InvalidInput

CODE_EXPIRED = "invitation_expired"
CODE_INVALID = "invitation_invalid"
CODE_ALREADY_ACCEPTED = "invitation_already_accepted"


class InvitationStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    EXPIRED = "expired"


class AcceptAction(str, Enum):
    NOOP = "noop"  # already accepted by this member
    MARK_ACCEPTED = "mark_accepted"  # member already, only flip status
    JOIN = "join"  # insert membership + member role, then flip status


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_token() -> str:
    return str(uuid.uuid4())


def expiry_from(issued_at: datetime, ttl_days: int) -> datetime:
    return issued_at + timedelta(days=ttl_days)


def parse_timestamp(value: Union[str, datetime, None]) -> Optional[datetime]:
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def is_expired(invitation: Dict[str, Any], now: Optional[datetime] = None) -> bool:
    now = now or utc_now()
    expires_at = parse_timestamp(invitation.get("expires_at"))
    return expires_at is not None and now > expires_at


def effective_status(invitation: Dict[str, Any], now: Optional[datetime] = None) -> InvitationStatus:
    if invitation.get("status") == InvitationStatus.ACCEPTED.value:
        return InvitationStatus.ACCEPTED
    if is_expired(invitation, now):
        return InvitationStatus.EXPIRED
    return InvitationStatus.PENDING


def describe(invitation: Dict[str, Any], group_name: Optional[str], now: Optional[datetime] = None) -> Dict[str, Any]:
    """Public view of an invitation for the token holder. Never includes the token."""
    status = effective_status(invitation, now)
    return {
        "id": invitation["id"],
        "group_id": invitation["group_id"],
        "group_name": group_name,
        "invitee_email": invitation.get("invitee_email"),
        "status": status.value,
        "expires_at": invitation.get("expires_at"),
        "is_valid": status == InvitationStatus.PENDING,
        "is_expired": status == InvitationStatus.EXPIRED,
    }


def plan_accept(
    invitation: Dict[str, Any],
    user_email: Optional[str],
    already_member: bool,
    now: Optional[datetime] = None,
) -> AcceptAction:
    if not user_email or user_email != invitation.get("invitee_email"):
        raise Forbidden("This invitation was sent to a different email address")
    status = effective_status(invitation, now)
    if status == InvitationStatus.ACCEPTED:
        if already_member:
            return AcceptAction.NOOP
        raise Conflict("This invitation has already been accepted", code=CODE_ALREADY_ACCEPTED)
    if status == InvitationStatus.EXPIRED:
        raise InvalidInput("This invitation has expired", code=CODE_EXPIRED)
    if already_member:
        return AcceptAction.MARK_ACCEPTED
    return AcceptAction.JOIN
