import logging
from typing import List

from supabase import Client

from underwraps.core.dependencies import RequestContext
from underwraps.core.errors import Internal, InvalidInput, NotFound
from underwraps.core.validation import ensure_uuid, sanitize_name
from underwraps.modules.groups.guard import GroupAction, require_group_action
from underwraps.modules.groups.schemas import GroupCreate, GroupMemberResponse, GroupResponse
from underwraps.modules.roles.resolver import Role, role_from_rows
from underwraps.modules.users.masking import email_for, load_managed_user_ids

logger = logging.getLogger(__name__)

GROUP_NAME_MAX_LENGTH = 200


class GroupService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def create_group(self, group_data: GroupCreate, ctx: RequestContext) -> GroupResponse:
        """Create a group; the creator becomes its first member with the owner role."""
        name = sanitize_name(group_data.name)
        if not name:
            raise InvalidInput("Name is required and must be a non-empty string")
        if len(name) > GROUP_NAME_MAX_LENGTH:
            raise InvalidInput(f"Name must be at most {GROUP_NAME_MAX_LENGTH} characters")

        result = self.supabase.table("groups").insert({
            "name": name,
            "owner_id": ctx.user_id,
        }).execute()
        if not result.data:
            raise Internal("Failed to create group")
        group = result.data[0]

        try:
            self.supabase.table("group_members").insert({
                "group_id": group["id"],
                "user_id": ctx.user_id,
            }).execute()
            self.supabase.table("user_roles").insert({
                "user_id": ctx.user_id,
                "group_id": group["id"],
                "role": Role.OWNER.value,
            }).execute()
        except Exception:
            logger.exception("Owner membership setup failed for group %s, rolling back", group["id"])
            self.supabase.table("groups").delete().eq("id", group["id"]).execute()
            raise Internal("Failed to create group")

        logger.info("Group %s created by %s", group["id"], ctx.user_id)
        return GroupResponse(**group)

    def list_groups(self, ctx: RequestContext, limit: int = 50, offset: int = 0) -> List[GroupResponse]:
        """Groups the caller is a member of (every group for a global admin), newest first."""
        query = self.supabase.table("groups").select("*")
        if not ctx.is_global_admin:
            members_result = self.supabase.table("group_members")\
                .select("group_id")\
                .eq("user_id", ctx.user_id)\
                .execute()
            group_ids = [m["group_id"] for m in members_result.data or []]
            if not group_ids:
                return []
            query = query.in_("id", group_ids)
        result = query.order("created_at", desc=True)\
            .limit(limit)\
            .offset(offset)\
            .execute()
        return [GroupResponse(**group) for group in result.data or []]

    def get_group(self, ctx: RequestContext, group_id: str) -> GroupResponse:
        ensure_uuid(group_id, "group ID")
        require_group_action(self.supabase, ctx, group_id, GroupAction.VIEW)
        result = self.supabase.table("groups")\
            .select("*")\
            .eq("id", group_id)\
            .limit(1)\
            .execute()
        if not result.data:
            raise NotFound("Group not found")
        return GroupResponse(**result.data[0])

    def delete_group(self, ctx: RequestContext, group_id: str) -> None:
        """Delete group; memberships, roles, wishlists, items, claims and invitations cascade."""
        ensure_uuid(group_id, "group ID")
        require_group_action(self.supabase, ctx, group_id, GroupAction.DELETE_GROUP)
        self.supabase.table("groups")\
            .delete()\
            .eq("id", group_id)\
            .execute()
        logger.info("Group %s deleted by %s", group_id, ctx.user_id)

    def list_members(self, ctx: RequestContext, group_id: str) -> List[GroupMemberResponse]:
        """Members with their stored role; emails masked unless the caller may see them."""
        ensure_uuid(group_id, "group ID")
        require_group_action(self.supabase, ctx, group_id, GroupAction.VIEW)

        members_result = self.supabase.table("group_members")\
            .select("*")\
            .eq("group_id", group_id)\
            .order("created_at")\
            .execute()
        members = members_result.data or []
        if not members:
            return []
        user_ids = [m["user_id"] for m in members]

        profiles_result = self.supabase.table("profiles")\
            .select("id, email, name")\
            .in_("id", user_ids)\
            .execute()
        profiles = {p["id"]: p for p in profiles_result.data or []}

        roles_result = self.supabase.table("user_roles")\
            .select("user_id, role")\
            .eq("group_id", group_id)\
            .in_("user_id", user_ids)\
            .execute()
        roles_by_user = {}
        for row in roles_result.data or []:
            roles_by_user.setdefault(row["user_id"], []).append(row)

        managed = load_managed_user_ids(self.supabase, ctx.user_id)
        response = []
        for member in members:
            profile = profiles.get(member["user_id"], {"id": member["user_id"]})
            response.append(GroupMemberResponse(
                id=member["id"],
                group_id=group_id,
                user_id=member["user_id"],
                name=profile.get("name"),
                email=email_for(ctx, profile, managed),
                role=role_from_rows(roles_by_user.get(member["user_id"])).value,
                created_at=member.get("created_at"),
            ))
        return response

    def remove_member(self, ctx: RequestContext, group_id: str, user_id: str) -> None:
        """Remove a member (or yourself) from the group along with their group role."""
        ensure_uuid(group_id, "group ID")
        ensure_uuid(user_id, "user ID")
        require_group_action(
            self.supabase, ctx, group_id, GroupAction.REMOVE_MEMBER, target_user_id=user_id
        )
        result = self.supabase.table("group_members")\
            .delete()\
            .eq("group_id", group_id)\
            .eq("user_id", user_id)\
            .execute()
        if not result.data:
            raise NotFound("Member not found")
        self.supabase.table("user_roles")\
            .delete()\
            .eq("group_id", group_id)\
            .eq("user_id", user_id)\
            .execute()
        logger.info("Member %s removed from group %s by %s", user_id, group_id, ctx.user_id)
