import hashlib
import logging
import time
from typing import Any, Dict

from supabase import Client

from underwraps.core.errors import Internal, NotFound, Unauthorized

logger = logging.getLogger(__name__)

# In-memory cache for get_current_user to reduce Supabase auth calls (e.g. many parallel requests with same token)
_AUTH_USER_CACHE: Dict[str, tuple] = {}
_AUTH_CACHE_TTL_SEC = 60
_AUTH_CACHE_MAX_SIZE = 500


class AuthService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_current_user(self, token: str) -> Dict[str, Any]:
        """Get current user details from Supabase Auth token. Uses short TTL cache to reduce auth API calls."""
        cache_key = hashlib.sha256(token.encode()).hexdigest()
        now = time.monotonic()
        if cache_key in _AUTH_USER_CACHE:
            user_data, expiry = _AUTH_USER_CACHE[cache_key]
            if now < expiry:
                return user_data
            del _AUTH_USER_CACHE[cache_key]
        try:
            user_response = self.supabase.auth.get_user(jwt=token)
        except Exception as e:
            logger.info("Token rejected by auth provider: %s", type(e).__name__)
            raise Unauthorized("Invalid or expired token")
        if not user_response or not user_response.user:
            raise Unauthorized("Invalid or expired token")
        user = user_response.user
        user_data = {
            "id": user.id,
            "email": user.email,
            "user_metadata": user.user_metadata or {},
            "app_metadata": user.app_metadata or {},
            "created_at": user.created_at,
        }
        if len(_AUTH_USER_CACHE) < _AUTH_CACHE_MAX_SIZE:
            _AUTH_USER_CACHE[cache_key] = (user_data, now + _AUTH_CACHE_TTL_SEC)
        return user_data

    def delete_auth_user(self, user_id: str) -> None:
        """Remove the auth user (requires service role key). Profile rows cascade from auth.users."""
        try:
            self.supabase.auth.admin.delete_user(user_id)
        except Exception as e:
            message = str(e).lower()
            if "not found" in message:
                raise NotFound("User not found")
            logger.error("Auth user deletion failed for %s: %s", user_id, e)
            raise Internal("Failed to delete user")


def clear_auth_cache() -> None:
    _AUTH_USER_CACHE.clear()
