"""
Email masking policy.

A viewer sees a member's full address when it is their own, when they are a
global admin, or when they hold owner/admin in a group the member belongs
to. Everyone else gets the masked form, e.g. john.doe@example.com ->
j***@example.com.
"""

from typing import Any, Dict, Iterable, Optional, Set

from supabase import Client

from underwraps.core.dependencies import RequestContext
from underwraps.modules.roles.resolver import MANAGER_ROLES

MASK = "***"


def mask_email(email: Optional[str]) -> str:
    if not email or email.count("@") != 1:
        return MASK
    local_part, domain = email.split("@")
    if not local_part or not domain:
        return MASK
    return f"{local_part[0]}{MASK}@{domain}"


def can_view_email(ctx: RequestContext, subject_id: str, managed_user_ids: Iterable[str]) -> bool:
    if ctx.user_id == subject_id or ctx.is_global_admin:
        return True
    return subject_id in set(managed_user_ids)


def email_for(ctx: RequestContext, subject: Dict[str, Any], managed_user_ids: Iterable[str]) -> str:
    email = subject.get("email")
    if can_view_email(ctx, subject.get("id"), managed_user_ids):
        return email or ""
    return mask_email(email)


def load_managed_user_ids(supabase: Client, viewer_id: str) -> Set[str]:
    """User ids that share a group in which the viewer holds owner or admin."""
    roles_result = supabase.table("user_roles")\
        .select("group_id")\
        .eq("user_id", viewer_id)\
        .in_("role", [r.value for r in MANAGER_ROLES])\
        .execute()
    group_ids = [r["group_id"] for r in roles_result.data or [] if r.get("group_id")]
    if not group_ids:
        return set()
    members_result = supabase.table("group_members")\
        .select("user_id")\
        .in_("group_id", group_ids)\
        .execute()
    return {m["user_id"] for m in members_result.data or []}
