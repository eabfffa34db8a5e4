"""
Membership guard: group-scoped authorization for every group action.

`authorize_group_action` is pure. It takes the caller's RequestContext and the
GroupFacts already loaded for the caller, and returns a Decision. Callers
short-circuit with `Decision.enforce()` before touching any data.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from supabase import Client

from underwraps.config.settings import settings
from underwraps.core.dependencies import RequestContext
from underwraps.core.errors import Forbidden, NotFound
from underwraps.modules.roles.resolver import MANAGER_ROLES, Role, resolve_role


class GroupAction(str, Enum):
    VIEW = "view"
    INVITE_MEMBER = "invite_member"
    REMOVE_MEMBER = "remove_member"
    CREATE_WISHLIST = "create_wishlist"
    DELETE_GROUP = "delete_group"
    CHANGE_ROLE = "change_role"


@dataclass(frozen=True)
class GroupFacts:
    group_id: str
    owner_id: str
    is_member: bool
    role: Role
    name: str = ""

    @property
    def is_manager(self) -> bool:
        return self.role in MANAGER_ROLES


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: str = ""

    def enforce(self) -> None:
        if not self.allowed:
            raise Forbidden(self.reason or "You do not have permission to perform this action")


ALLOW = Decision(True)


def _deny(reason: str) -> Decision:
    return Decision(False, reason)


def authorize_group_action(
    ctx: RequestContext,
    facts: GroupFacts,
    action: GroupAction,
    target_user_id: Optional[str] = None,
    new_role: Optional[str] = None,
    require_admin_to_invite: Optional[bool] = None,
) -> Decision:
    if action == GroupAction.VIEW:
        if facts.is_member or ctx.is_global_admin:
            return ALLOW
        return _deny("You must be a member of this group")

    if action == GroupAction.CREATE_WISHLIST:
        if facts.is_member:
            return ALLOW
        return _deny("You must be a member of this group to create a wishlist")

    if action == GroupAction.INVITE_MEMBER:
        if require_admin_to_invite is None:
            require_admin_to_invite = settings.invitations_require_admin
        if ctx.is_global_admin:
            return ALLOW
        if not facts.is_member:
            return _deny("You must be a member of this group to send invitations")
        if require_admin_to_invite and not facts.is_manager:
            return _deny("You must be a group admin to send invitations")
        return ALLOW

    if action == GroupAction.REMOVE_MEMBER:
        # The owner leaves only by deleting the group
        if target_user_id == facts.owner_id:
            return _deny("Cannot remove the group owner")
        if target_user_id == ctx.user_id:
            return ALLOW
        if ctx.is_global_admin or facts.is_manager:
            return ALLOW
        return _deny("You must be a group admin to remove members")

    if action == GroupAction.DELETE_GROUP:
        if ctx.is_global_admin or facts.owner_id == ctx.user_id or facts.role == Role.OWNER:
            return ALLOW
        return _deny("Only the group owner can delete this group")

    if action == GroupAction.CHANGE_ROLE:
        if ctx.is_global_admin:
            return ALLOW
        if not facts.is_manager:
            return _deny("You must be an admin to update user roles")
        if target_user_id == ctx.user_id:
            return _deny("You cannot change your own role")
        if target_user_id == facts.owner_id:
            return _deny("Cannot change the group owner's role")
        if new_role == Role.OWNER.value:
            return _deny("Only a global admin can grant the owner role")
        return ALLOW

    return _deny("Unknown action")


def load_group_facts(supabase: Client, group_id: str, user_id: str) -> GroupFacts:
    """Fetch the group, the caller's membership and stored role. NotFound when the group is absent."""
    group_result = supabase.table("groups")\
        .select("id, name, owner_id")\
        .eq("id", group_id)\
        .limit(1)\
        .execute()
    if not group_result.data:
        raise NotFound("Group not found")
    group = group_result.data[0]
    member_result = supabase.table("group_members")\
        .select("id")\
        .eq("group_id", group_id)\
        .eq("user_id", user_id)\
        .limit(1)\
        .execute()
    return GroupFacts(
        group_id=group_id,
        owner_id=group["owner_id"],
        is_member=bool(member_result.data),
        role=resolve_role(supabase, user_id, group_id),
        name=group.get("name", ""),
    )


def require_group_action(
    supabase: Client,
    ctx: RequestContext,
    group_id: str,
    action: GroupAction,
    target_user_id: Optional[str] = None,
    new_role: Optional[str] = None,
) -> GroupFacts:
    facts = load_group_facts(supabase, group_id, ctx.user_id)
    authorize_group_action(ctx, facts, action, target_user_id=target_user_id, new_role=new_role).enforce()
    return facts
