import re
from typing import Iterable, List


CORS_ALLOW_HEADERS = "authorization, x-client-info, apikey, content-type"
CORS_ALLOW_METHODS = "POST, GET, OPTIONS, PUT, DELETE"


def origin_matches(origin: str, pattern: str) -> bool:
    """Exact match, or "*" in the pattern matches any run of characters."""
    if pattern == origin:
        return True
    if "*" not in pattern:
        return False
    regex = ".*".join(re.escape(part) for part in pattern.split("*"))
    return re.fullmatch(regex, origin) is not None


def resolve_allowed_origin(origin: str, allowed: List[str]) -> str:
    """Echo an allowed origin back; anything else gets the primary (first) origin."""
    if origin and any(origin_matches(origin, pattern) for pattern in allowed):
        return origin
    return allowed[0] if allowed else ""


class SecurityHeadersMiddleware:
    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        async def send_with_headers(message):
            if message["type"] == "http.response.start":
                message.setdefault("headers", [])
                message["headers"].extend([
                    (b"X-Content-Type-Options", b"nosniff"),
                    (b"X-Frame-Options", b"DENY"),
                    (b"X-XSS-Protection", b"1; mode=block"),
                ])
            await send(message)

        await self.app(scope, receive, send_with_headers)


class OriginAllowListMiddleware:
    """CORS with wildcard origin patterns and a fixed fallback origin.

    Every OPTIONS request is answered here with 204; other responses get the
    same CORS headers appended.
    """

    def __init__(self, app, allow_origins: Iterable[str]):
        self.app = app
        self.allow_origins = list(allow_origins)

    def _cors_headers(self, scope) -> list:
        origin = ""
        for name, value in scope.get("headers", []):
            if name == b"origin":
                origin = value.decode("latin-1")
                break
        return [
            (b"Access-Control-Allow-Origin", resolve_allowed_origin(origin, self.allow_origins).encode("latin-1")),
            (b"Access-Control-Allow-Headers", CORS_ALLOW_HEADERS.encode("latin-1")),
            (b"Access-Control-Allow-Methods", CORS_ALLOW_METHODS.encode("latin-1")),
            (b"Access-Control-Allow-Credentials", b"true"),
            (b"Vary", b"Origin"),
        ]

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        cors_headers = self._cors_headers(scope)

        if scope["method"] == "OPTIONS":
            await send({"type": "http.response.start", "status": 204, "headers": cors_headers})
            await send({"type": "http.response.body", "body": b""})
            return

        async def send_with_cors(message):
            if message["type"] == "http.response.start":
                message.setdefault("headers", [])
                message["headers"].extend(cors_headers)
            await send(message)

        await self.app(scope, receive, send_with_cors)
