"""
Role lookup for a (user, group) pair and the global-admin capability.

Roles are read from user_roles exactly as stored. Membership and group
ownership never imply a role.
"""

from enum import Enum
from typing import Any, Dict, Iterable, Optional

from supabase import Client


class Role(str, Enum):
    OWNER = "owner"
    ADMIN = "admin"
    MEMBER = "member"
    NONE = "none"


STORED_ROLES = (Role.OWNER.value, Role.ADMIN.value, Role.MEMBER.value)
MANAGER_ROLES = (Role.OWNER, Role.ADMIN)


def role_from_rows(rows: Optional[Iterable[Dict[str, Any]]]) -> Role:
    """Return the stored role from already-fetched user_roles rows, or Role.NONE."""
    for row in rows or []:
        value = row.get("role")
        if value in STORED_ROLES:
            return Role(value)
    return Role.NONE


def resolve_role(supabase: Client, user_id: str, group_id: Optional[str]) -> Role:
    if not user_id or not group_id:
        return Role.NONE
    result = supabase.table("user_roles")\
        .select("role")\
        .eq("user_id", user_id)\
        .eq("group_id", group_id)\
        .limit(1)\
        .execute()
    return role_from_rows(result.data)


def has_super_user_flag(user_data: Dict[str, Any]) -> bool:
    """app_metadata is set server-side and cannot be modified by users."""
    app_metadata = user_data.get("app_metadata") or {}
    return app_metadata.get("type") == "super_user"


def is_global_admin(supabase: Client, user_data: Dict[str, Any]) -> bool:
    """Super-user flag on the auth user, or a global-scope admin row in user_roles."""
    if has_super_user_flag(user_data):
        return True
    result = supabase.table("user_roles")\
        .select("role")\
        .eq("user_id", user_data["id"])\
        .is_("group_id", "null")\
        .eq("role", Role.ADMIN.value)\
        .limit(1)\
        .execute()
    return bool(result.data)
