import logging
from typing import Optional

from supabase import Client

from underwraps.core.dependencies import RequestContext
from underwraps.core.errors import Forbidden, InvalidInput, NotFound
from underwraps.core.validation import ensure_uuid
from underwraps.modules.groups.guard import GroupAction, authorize_group_action, load_group_facts
from underwraps.modules.roles.resolver import Role
from underwraps.modules.roles.schemas import RoleUpdate, RoleUpdateResponse

logger = logging.getLogger(__name__)


class RoleService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def update_role(self, ctx: RequestContext, data: RoleUpdate) -> RoleUpdateResponse:
        ensure_uuid(data.user_id, "user ID")
        if data.group_id is not None:
            ensure_uuid(data.group_id, "group ID")
            self._authorize_group_change(ctx, data)
        else:
            self._authorize_global_change(ctx, data)

        if data.role is None:
            self._delete_role(data.user_id, data.group_id)
        elif data.group_id is None:
            self._set_global_role(data.user_id, data.role)
        else:
            self.supabase.table("user_roles").upsert({
                "user_id": data.user_id,
                "group_id": data.group_id,
                "role": data.role,
            }, on_conflict="user_id,group_id").execute()

        logger.info(
            "Role for user %s in %s set to %s by %s",
            data.user_id,
            f"group {data.group_id}" if data.group_id else "global scope",
            data.role,
            ctx.user_id,
        )
        return RoleUpdateResponse(user_id=data.user_id, group_id=data.group_id, role=data.role)

    def _authorize_group_change(self, ctx: RequestContext, data: RoleUpdate) -> None:
        facts = load_group_facts(self.supabase, data.group_id, ctx.user_id)
        authorize_group_action(
            ctx, facts, GroupAction.CHANGE_ROLE, target_user_id=data.user_id, new_role=data.role
        ).enforce()
        if data.role is not None and not self._is_member(data.group_id, data.user_id):
            raise NotFound("User is not a member of this group")

    def _authorize_global_change(self, ctx: RequestContext, data: RoleUpdate) -> None:
        if not ctx.is_global_admin:
            raise Forbidden("You must be an admin to update user roles")
        if data.role is not None and data.role != Role.ADMIN.value:
            raise InvalidInput("Global scope only supports the admin role")

    def _is_member(self, group_id: str, user_id: str) -> bool:
        result = self.supabase.table("group_members")\
            .select("id")\
            .eq("group_id", group_id)\
            .eq("user_id", user_id)\
            .limit(1)\
            .execute()
        return bool(result.data)

    def _delete_role(self, user_id: str, group_id: Optional[str]) -> None:
        query = self.supabase.table("user_roles")\
            .delete()\
            .eq("user_id", user_id)
        if group_id is None:
            query = query.is_("group_id", "null")
        else:
            query = query.eq("group_id", group_id)
        query.execute()

    def _set_global_role(self, user_id: str, role: str) -> None:
        existing = self.supabase.table("user_roles")\
            .select("id")\
            .eq("user_id", user_id)\
            .is_("group_id", "null")\
            .limit(1)\
            .execute()
        if existing.data:
            self.supabase.table("user_roles")\
                .update({"role": role})\
                .eq("id", existing.data[0]["id"])\
                .execute()
        else:
            self.supabase.table("user_roles").insert({
                "user_id": user_id,
                "group_id": None,
                "role": role,
            }).execute()
