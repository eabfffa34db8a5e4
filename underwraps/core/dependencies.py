"""
Core dependencies for route protection.

Every authenticated route receives a RequestContext built once per request:
the verified user id, their email and the global-admin capability. Group
level decisions are made by the membership guard in modules/groups/guard.py.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from fastapi import Depends, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from supabase import Client

from underwraps.core.errors import Unauthorized
from underwraps.database.supabase_client import get_service_supabase, get_supabase
from underwraps.modules.auth.service import AuthService
from underwraps.modules.roles.resolver import is_global_admin

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


@dataclass
class RequestContext:
    user_id: str
    email: Optional[str]
    is_global_admin: bool = False
    user: Dict[str, Any] = field(default_factory=dict)

    @property
    def display_name(self) -> Optional[str]:
        metadata = self.user.get("user_metadata") or {}
        return metadata.get("name") or metadata.get("full_name")


def get_auth_service(supabase: Client = Depends(get_supabase)) -> AuthService:
    return AuthService(supabase)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> dict:
    """Extract current user info from JWT token"""
    if credentials is None or not credentials.credentials:
        raise Unauthorized()
    return auth_service.get_current_user(credentials.credentials)


def get_request_context(
    user_data: dict = Depends(get_current_user),
    service_supabase: Client = Depends(get_service_supabase)
) -> RequestContext:
    return RequestContext(
        user_id=user_data["id"],
        email=user_data.get("email"),
        is_global_admin=is_global_admin(service_supabase, user_data),
        user=user_data,
    )
