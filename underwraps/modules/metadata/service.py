import asyncio
import ipaddress
import logging
import re
import socket
from typing import Awaitable, Callable, List, Optional, Union
from urllib.parse import urlsplit

import httpx

from underwraps.config.settings import settings
from underwraps.core.errors import InvalidInput
from underwraps.modules.metadata.extractor import extract_product_metadata
from underwraps.modules.metadata.schemas import ProductMetadataResponse

logger = logging.getLogger(__name__)

# (host, port) -> resolved IP address strings
Resolver = Callable[[str, int], Awaitable[List[str]]]

URL_MAX_LENGTH = 2048
BROWSER_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/123.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
}
BLOCKED_HOST_PATTERNS = (
    re.compile(r"^localhost$", re.IGNORECASE),
    re.compile(r"^127\."),
    re.compile(r"^10\."),
    re.compile(r"^172\.(1[6-9]|2[0-9]|3[0-1])\."),
    re.compile(r"^192\.168\."),
    re.compile(r"^::1$"),
    re.compile(r"^fe80:", re.IGNORECASE),
)
DECIMAL_HOST_RE = re.compile(r"^\d+$")
HEX_HOST_RE = re.compile(r"^0x[0-9a-f]+$", re.IGNORECASE)


class BlockedHostError(InvalidInput):
    default_message = "Cannot access private network URLs"


def _parse_ip(host: str) -> Optional[Union[ipaddress.IPv4Address, ipaddress.IPv6Address]]:
    """Dotted, IPv6, or single-integer IPv4 forms such as 2130706433 and 0x7f000001."""
    try:
        if DECIMAL_HOST_RE.match(host):
            return ipaddress.IPv4Address(int(host))
        if HEX_HOST_RE.match(host):
            return ipaddress.IPv4Address(int(host, 16))
        return ipaddress.ip_address(host.split("%")[0])
    except ValueError:
        return None


def is_blocked_address(ip: Union[ipaddress.IPv4Address, ipaddress.IPv6Address]) -> bool:
    mapped = getattr(ip, "ipv4_mapped", None)
    if mapped is not None:
        ip = mapped
    return (
        ip.is_private
        or ip.is_loopback
        or ip.is_link_local
        or ip.is_unspecified
        or ip.is_reserved
        or ip.is_multicast
    )


def is_blocked_host(hostname: Optional[str]) -> bool:
    host = (hostname or "").strip("[]").lower()
    if not host:
        return True
    if any(p.search(host) for p in BLOCKED_HOST_PATTERNS):
        return True
    ip = _parse_ip(host)
    return ip is not None and is_blocked_address(ip)


async def resolve_host(host: str, port: int) -> List[str]:
    infos = await asyncio.get_running_loop().getaddrinfo(host, port, type=socket.SOCK_STREAM)
    return [info[4][0] for info in infos]


def validate_product_url(url: str) -> str:
    url = (url or "").strip()
    if not url:
        raise InvalidInput("URL is required")
    if len(url) > URL_MAX_LENGTH:
        raise InvalidInput(f"URL must be at most {URL_MAX_LENGTH} characters")
    parts = urlsplit(url)
    if parts.scheme not in ("http", "https") or not parts.hostname:
        raise InvalidInput("A valid http(s) URL is required")
    if is_blocked_host(parts.hostname):
        raise BlockedHostError()
    return url


class MetadataService:
    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None, resolver: Optional[Resolver] = None):
        self.transport = transport
        self.resolver = resolver or resolve_host

    async def _guard_request(self, request: httpx.Request) -> None:
        # Runs for the first request and every redirect hop
        host = request.url.host
        if is_blocked_host(host):
            logger.warning("Blocked fetch to private host %s", host)
            raise BlockedHostError()
        port = request.url.port or (443 if request.url.scheme == "https" else 80)
        try:
            addresses = await self.resolver(host, port)
        except OSError:
            raise InvalidInput("Unable to fetch product information")
        for address in addresses:
            ip = _parse_ip(address)
            if ip is None or is_blocked_address(ip):
                logger.warning("Blocked fetch to %s resolving to %s", host, address)
                raise BlockedHostError()

    async def _fetch_html(self, url: str) -> str:
        async with httpx.AsyncClient(
            timeout=settings.metadata_fetch_timeout_seconds,
            follow_redirects=True,
            headers=BROWSER_HEADERS,
            event_hooks={"request": [self._guard_request]},
            transport=self.transport,
        ) as client:
            response = await client.get(url)
        content_type = response.headers.get("content-type", "")
        if "text/html" not in content_type:
            raise InvalidInput("The URL does not point to a valid web page")
        return response.text

    async def fetch_product_metadata(self, url: str) -> ProductMetadataResponse:
        url = validate_product_url(url)
        try:
            html = await self._fetch_html(url)
        except httpx.TimeoutException:
            raise InvalidInput("Request timed out while fetching URL")
        except httpx.HTTPError as e:
            logger.info("Metadata fetch failed for %s: %s", url, type(e).__name__)
            raise InvalidInput("Unable to fetch product information")
        return ProductMetadataResponse(**extract_product_metadata(html))
