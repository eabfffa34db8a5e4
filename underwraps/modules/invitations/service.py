import logging
from typing import Optional

from supabase import Client

from underwraps.config.settings import settings
from underwraps.core.dependencies import RequestContext
from underwraps.core.errors import Internal, InvalidInput, NotFound, is_unique_violation
from underwraps.core.validation import ensure_uuid, is_uuid, is_valid_email
from underwraps.modules.groups.guard import GroupAction, require_group_action
from underwraps.modules.invitations import lifecycle
from underwraps.modules.invitations.schemas import (
    InvitationAcceptResponse, InvitationCreate, InvitationCreateResponse, InvitationPublic
)
from underwraps.modules.roles.resolver import Role

logger = logging.getLogger(__name__)


class InvitationService:
    def __init__(self, supabase: Client, service_supabase: Optional[Client] = None):
        self.supabase = supabase
        self.service_supabase = service_supabase or supabase

    def send_invitation(self, ctx: RequestContext, data: InvitationCreate) -> InvitationCreateResponse:
        ensure_uuid(data.group_id, "group ID")
        email = data.invitee_email.strip()
        if not is_valid_email(email):
            raise InvalidInput("Invalid email address")
        require_group_action(self.supabase, ctx, data.group_id, GroupAction.INVITE_MEMBER)

        now = lifecycle.utc_now()
        token = lifecycle.new_token()
        expires_at = lifecycle.expiry_from(now, settings.invitation_ttl_days).isoformat()
        result = self.supabase.table("invitations").insert({
            "group_id": data.group_id,
            "invitee_email": email,
            "inviter_id": ctx.user_id,
            "token": token,
            "status": lifecycle.InvitationStatus.PENDING.value,
            "expires_at": expires_at,
        }).execute()
        if not result.data:
            raise Internal("Failed to create invitation")
        invitation = result.data[0]

        # Delivery happens outside this service; the link is handed back to the inviter.
        link = f"{settings.app_base_url.rstrip('/')}/accept-invite?token={token}"
        logger.info("Invitation %s created for group %s by %s", invitation["id"], data.group_id, ctx.user_id)
        return InvitationCreateResponse(
            invitation_id=invitation["id"],
            invitation_link=link,
            expires_at=expires_at,
        )

    def validate_token(self, token: str) -> InvitationPublic:
        """Look up an invitation by token with the service role client."""
        if not is_uuid(token):
            raise InvalidInput("Invalid invitation token format", code=lifecycle.CODE_INVALID)
        result = self.service_supabase.table("invitations")\
            .select("id, group_id, invitee_email, status, expires_at")\
            .eq("token", token)\
            .limit(1)\
            .execute()
        if not result.data:
            raise NotFound("Invitation not found or invalid", code=lifecycle.CODE_INVALID)
        invitation = result.data[0]

        group_result = self.service_supabase.table("groups")\
            .select("name")\
            .eq("id", invitation["group_id"])\
            .limit(1)\
            .execute()
        group_name = group_result.data[0]["name"] if group_result.data else None
        return InvitationPublic(**lifecycle.describe(invitation, group_name))

    def accept_invitation(self, ctx: RequestContext, invitation_id: str) -> InvitationAcceptResponse:
        ensure_uuid(invitation_id, "invitation ID")
        result = self.supabase.table("invitations")\
            .select("id, group_id, invitee_email, status, expires_at")\
            .eq("id", invitation_id)\
            .limit(1)\
            .execute()
        if not result.data:
            raise NotFound("Invitation not found", code=lifecycle.CODE_INVALID)
        invitation = result.data[0]
        group_id = invitation["group_id"]

        action = lifecycle.plan_accept(invitation, ctx.email, self._is_member(group_id, ctx.user_id))
        if action == lifecycle.AcceptAction.NOOP:
            return InvitationAcceptResponse(group_id=group_id, already_member=True)

        already_member = action == lifecycle.AcceptAction.MARK_ACCEPTED
        if action == lifecycle.AcceptAction.JOIN:
            already_member = not self._join(group_id, ctx.user_id)

        self.supabase.table("invitations")\
            .update({"status": lifecycle.InvitationStatus.ACCEPTED.value})\
            .eq("id", invitation_id)\
            .execute()
        logger.info("Invitation %s accepted by %s", invitation_id, ctx.user_id)
        return InvitationAcceptResponse(group_id=group_id, already_member=already_member)

    def _is_member(self, group_id: str, user_id: str) -> bool:
        result = self.supabase.table("group_members")\
            .select("id")\
            .eq("group_id", group_id)\
            .eq("user_id", user_id)\
            .limit(1)\
            .execute()
        return bool(result.data)

    def _join(self, group_id: str, user_id: str) -> bool:
        """Insert membership and member role. False if a concurrent accept got there first."""
        try:
            self.supabase.table("group_members").insert({
                "group_id": group_id,
                "user_id": user_id,
            }).execute()
        except Exception as e:
            if not is_unique_violation(e):
                raise
            logger.info("Membership for %s in %s already present", user_id, group_id)
            return False
        self.supabase.table("user_roles").upsert({
            "user_id": user_id,
            "group_id": group_id,
            "role": Role.MEMBER.value,
        }, on_conflict="user_id,group_id", ignore_duplicates=True).execute()
        return True
