"""
Tests for product metadata extraction and the guarded fetch.
"""
import httpx
import pytest

from underwraps.core.errors import InvalidInput
from underwraps.modules.metadata.extractor import coerce_price, extract_product_metadata
from underwraps.modules.metadata.routes import get_metadata_service
from underwraps.modules.metadata.service import (
    BlockedHostError, MetadataService, is_blocked_host, validate_product_url
)
from underwraps.main import app

JSON_LD_PAGE = """
<html><head>
<title>Fallback title</title>
<script type="application/ld+json">
{"@context": "https://schema.org", "@graph": [
  {"@type": "BreadcrumbList"},
  {"@type": "Product", "name": "Espresso Machine", "image": ["https://shop.test/e.jpg"],
   "offers": {"@type": "Offer", "price": "1,299.99", "priceCurrency": "eur"}}
]}
</script>
</head></html>
"""

META_PAGE = """
<html><head>
<meta property="og:title" content="Wool Scarf">
<meta property="og:image" content="https://shop.test/scarf.jpg">
<meta property="product:price:amount" content="19,99">
<meta property="product:price:currency" content="gbp">
</head></html>
"""


def test_json_ld_product_wins():
    meta = extract_product_metadata(JSON_LD_PAGE)
    assert meta == {
        "title": "Espresso Machine",
        "image_url": "https://shop.test/e.jpg",
        "price": 1299.99,
        "currency": "EUR",
    }


def test_meta_tags_fallback():
    meta = extract_product_metadata(META_PAGE)
    assert meta["title"] == "Wool Scarf"
    assert meta["image_url"] == "https://shop.test/scarf.jpg"
    assert meta["price"] == 19.99
    assert meta["currency"] == "GBP"


def test_title_tag_fallback_and_missing_fields():
    meta = extract_product_metadata("<html><title> Plain page </title></html>")
    assert meta == {"title": "Plain page", "image_url": None, "price": None, "currency": None}


@pytest.mark.parametrize("raw,expected", [
    ("$1,299.99", 1299.99),
    ("19,99", 19.99),
    (42, 42.0),
    ("free", None),
])
def test_coerce_price(raw, expected):
    assert coerce_price(raw) == expected


@pytest.mark.parametrize("host", [
    "localhost", "127.0.0.1", "10.1.2.3", "172.20.0.1", "192.168.1.1", "::1", "[::1]",
    "fe80::1", "169.254.169.254", "0.0.0.0", "",
])
def test_private_hosts_are_blocked(host):
    assert is_blocked_host(host)


@pytest.mark.parametrize("host", ["shop.example.com", "172.32.0.1", "8.8.8.8"])
def test_public_hosts_are_allowed(host):
    assert not is_blocked_host(host)


def test_validate_product_url():
    assert validate_product_url(" https://shop.test/p/1 ") == "https://shop.test/p/1"
    with pytest.raises(InvalidInput):
        validate_product_url("ftp://shop.test/file")
    with pytest.raises(BlockedHostError):
        validate_product_url("http://192.168.0.10/admin")


PUBLIC_ADDRESS = "93.184.216.34"


def fake_resolver(records=None):
    """Resolve from a fixed host -> addresses map; unknown hosts get a public address."""
    records = records or {}

    async def resolve(host, port):
        return records.get(host, [PUBLIC_ADDRESS])

    return resolve


def service_with(handler, records=None):
    return MetadataService(transport=httpx.MockTransport(handler), resolver=fake_resolver(records))


def html_page(text):
    return lambda request: httpx.Response(200, headers={"content-type": "text/html"}, text=text)


@pytest.mark.parametrize("host", ["2130706433", "0x7f000001", "0X0A000001", "167772161"])
def test_integer_ipv4_hosts_are_blocked(host):
    assert is_blocked_host(host)


def test_integer_ipv4_url_is_rejected_before_fetch():
    with pytest.raises(BlockedHostError):
        validate_product_url("http://2130706433:8080/")


@pytest.mark.asyncio
async def test_fetch_extracts_metadata_from_html():
    result = await service_with(html_page(META_PAGE)).fetch_product_metadata("https://shop.test/scarf")
    assert result.success is True
    assert result.title == "Wool Scarf"


@pytest.mark.asyncio
async def test_host_resolving_to_private_address_is_blocked():
    fetched = []

    def handler(request):
        fetched.append(request.url)
        return html_page("<title>INTERNAL SECRET</title>")(request)

    service = service_with(handler, {"intranet.shop.test": ["127.0.0.1"]})
    with pytest.raises(BlockedHostError):
        await service.fetch_product_metadata("http://intranet.shop.test/")
    assert fetched == []


@pytest.mark.asyncio
async def test_host_with_any_private_record_is_blocked():
    service = service_with(html_page("<title>x</title>"), {"mixed.shop.test": [PUBLIC_ADDRESS, "10.0.0.7"]})
    with pytest.raises(BlockedHostError):
        await service.fetch_product_metadata("https://mixed.shop.test/")


@pytest.mark.asyncio
async def test_ipv4_mapped_ipv6_record_is_blocked():
    service = service_with(html_page("<title>x</title>"), {"mapped.shop.test": ["::ffff:169.254.169.254"]})
    with pytest.raises(BlockedHostError):
        await service.fetch_product_metadata("https://mapped.shop.test/")


@pytest.mark.asyncio
async def test_unresolvable_host_is_invalid_input():
    async def failing_resolver(host, port):
        raise OSError("Name or service not known")

    service = MetadataService(transport=httpx.MockTransport(html_page("")), resolver=failing_resolver)
    with pytest.raises(InvalidInput) as exc_info:
        await service.fetch_product_metadata("https://nowhere.shop.test/")
    assert exc_info.value.message == "Unable to fetch product information"


@pytest.mark.asyncio
async def test_redirect_to_private_host_is_blocked():
    def handler(request):
        if request.url.host == "shop.test":
            return httpx.Response(302, headers={"location": "http://127.0.0.1/internal"})
        return html_page("<title>secret</title>")(request)

    with pytest.raises(BlockedHostError):
        await service_with(handler).fetch_product_metadata("https://shop.test/x")


@pytest.mark.asyncio
async def test_redirect_to_name_resolving_privately_is_blocked():
    def handler(request):
        if request.url.host == "shop.test":
            return httpx.Response(302, headers={"location": "http://2130706433/internal"})
        return html_page("<title>secret</title>")(request)

    with pytest.raises(BlockedHostError):
        await service_with(handler).fetch_product_metadata("https://shop.test/x")


@pytest.mark.asyncio
async def test_non_html_response_is_rejected():
    def handler(request):
        return httpx.Response(200, headers={"content-type": "application/json"}, text="{}")

    with pytest.raises(InvalidInput) as exc_info:
        await service_with(handler).fetch_product_metadata("https://shop.test/api")
    assert exc_info.value.message == "The URL does not point to a valid web page"


@pytest.mark.asyncio
async def test_timeout_maps_to_invalid_input():
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(InvalidInput) as exc_info:
        await service_with(handler).fetch_product_metadata("https://shop.test/x")
    assert exc_info.value.message == "Request timed out while fetching URL"


def test_metadata_route_requires_auth(client):
    response = client.post("/api/v1/metadata", json={"url": "https://shop.test/x"})
    assert response.status_code == 401
    assert response.json()["code"] == "unauthorized"


def test_metadata_route(client, world):
    app.dependency_overrides[get_metadata_service] = lambda: service_with(html_page(JSON_LD_PAGE))
    response = client.post("/api/v1/metadata", json={"url": "https://shop.test/e"}, headers=world.headers("carol"))
    assert response.status_code == 200
    assert response.json()["title"] == "Espresso Machine"

    for url in ("http://localhost:8000/", "http://2130706433/"):
        blocked = client.post("/api/v1/metadata", json={"url": url}, headers=world.headers("carol"))
        assert blocked.status_code == 400
        assert blocked.json()["detail"] == "Cannot access private network URLs"
