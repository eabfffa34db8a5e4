import logging
from typing import List, Optional

from supabase import Client

from underwraps.core.dependencies import RequestContext
from underwraps.core.errors import Forbidden, NotFound
from underwraps.core.validation import ensure_uuid
from underwraps.modules.auth.service import AuthService
from underwraps.modules.users.masking import email_for, load_managed_user_ids
from underwraps.modules.users.schemas import UserResponse

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _group_ids_for(self, user_id: str) -> List[str]:
        result = self.supabase.table("group_members")\
            .select("group_id")\
            .eq("user_id", user_id)\
            .execute()
        return [g["group_id"] for g in result.data or []]

    def user_can_access_user(self, current_user_id: str, target_user_id: str) -> bool:
        """True if target is self or shares at least one group with current user"""
        if current_user_id == target_user_id:
            return True
        my_group_ids = self._group_ids_for(current_user_id)
        if not my_group_ids:
            return False
        member_result = self.supabase.table("group_members")\
            .select("id")\
            .eq("user_id", target_user_id)\
            .in_("group_id", my_group_ids)\
            .limit(1)\
            .execute()
        return bool(member_result.data)

    def _to_response(self, ctx: RequestContext, profile: dict, managed: set) -> UserResponse:
        return UserResponse(**{**profile, "email": email_for(ctx, profile, managed)})

    def get_user(self, ctx: RequestContext, user_id: str) -> UserResponse:
        """Get a profile (self, global admin, or someone sharing a group) with the email policy applied"""
        ensure_uuid(user_id, "user ID")
        if not ctx.is_global_admin and not self.user_can_access_user(ctx.user_id, user_id):
            raise Forbidden("User not accessible")
        result = self.supabase.table("profiles")\
            .select("*")\
            .eq("id", user_id)\
            .limit(1)\
            .execute()
        if not result.data:
            raise NotFound("User not found")
        managed = load_managed_user_ids(self.supabase, ctx.user_id)
        return self._to_response(ctx, result.data[0], managed)

    def get_profile(self, user_id: str) -> Optional[dict]:
        result = self.supabase.table("profiles")\
            .select("*")\
            .eq("id", user_id)\
            .limit(1)\
            .execute()
        return result.data[0] if result.data else None

    def list_users(self, ctx: RequestContext, limit: int = 50, offset: int = 0) -> List[UserResponse]:
        """Global admin gets all users; everyone else gets the members of their groups."""
        query = self.supabase.table("profiles").select("*")
        if not ctx.is_global_admin:
            user_ids = {ctx.user_id}
            group_ids = self._group_ids_for(ctx.user_id)
            if group_ids:
                members_result = self.supabase.table("group_members")\
                    .select("user_id")\
                    .in_("group_id", group_ids)\
                    .execute()
                user_ids.update(m["user_id"] for m in members_result.data or [])
            query = query.in_("id", sorted(user_ids))
        result = query.order("created_at", desc=True)\
            .limit(limit)\
            .offset(offset)\
            .execute()
        managed = load_managed_user_ids(self.supabase, ctx.user_id)
        return [self._to_response(ctx, profile, managed) for profile in result.data or []]

    def delete_user(self, ctx: RequestContext, user_id: str, admin_auth: AuthService) -> None:
        """Delete an account (global admin only, never yourself). Owned data cascades from auth.users."""
        ensure_uuid(user_id, "user ID")
        if not ctx.is_global_admin:
            raise Forbidden("You must be a global admin to delete users")
        if ctx.user_id == user_id:
            raise Forbidden("You cannot delete your own account")
        admin_auth.delete_auth_user(user_id)
        logger.info("User %s deleted by admin %s", user_id, ctx.user_id)
