"""
Product details from a page's HTML.

Order of preference: a JSON-LD Product node, then OpenGraph/Twitter meta
tags or <title>, then price meta tags.
"""

import json
import re
from typing import Any, Dict, Iterator, Optional

JSON_LD_RE = re.compile(
    r"<script[^>]*type=[\"']application/ld\+json[\"'][^>]*>(.*?)</script>",
    re.IGNORECASE | re.DOTALL,
)
TITLE_RE = re.compile(r"<title[^>]*>([^<]+)</title>", re.IGNORECASE)
IMAGE_SRC_RE = re.compile(r"<link[^>]*rel=[\"']image_src[\"'][^>]*href=[\"']([^\"']+)[\"'][^>]*>", re.IGNORECASE)

PRICE_META_CANDIDATES = (
    ("property", "product:price:amount"),
    ("property", "og:price:amount"),
    ("name", "price"),
    ("name", "product:price:amount"),
)


def meta_content(html: str, attr: str, key: str) -> Optional[str]:
    pattern = rf"<meta[^>]*{attr}=[\"']{re.escape(key)}[\"'][^>]*content=[\"']([^\"']+)[\"'][^>]*>"
    match = re.search(pattern, html, re.IGNORECASE)
    return match.group(1).strip() if match else None


def coerce_price(raw: Any) -> Optional[float]:
    """Parse "$1,299.99" or decimal-comma "19,99" style strings."""
    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        return float(raw)
    cleaned = re.sub(r"[^0-9.,]", "", str(raw or "")).strip()
    if not cleaned:
        return None
    if "," in cleaned and "." in cleaned:
        normalized = cleaned.replace(",", "")
    elif "," in cleaned:
        normalized = cleaned.replace(".", "").replace(",", ".", 1)
    else:
        normalized = cleaned
    try:
        return float(normalized)
    except ValueError:
        return None


def _json_ld_nodes(html: str) -> Iterator[Dict[str, Any]]:
    for match in JSON_LD_RE.finditer(html):
        try:
            parsed = json.loads(match.group(1).strip())
        except ValueError:
            continue
        for node in parsed if isinstance(parsed, list) else [parsed]:
            if not isinstance(node, dict):
                continue
            graph = node.get("@graph")
            for candidate in graph if isinstance(graph, list) else [node]:
                if isinstance(candidate, dict):
                    yield candidate


def _is_product(node: Dict[str, Any]) -> bool:
    node_type = node.get("@type") or node.get("type")
    types = node_type if isinstance(node_type, list) else [node_type]
    return any(isinstance(t, str) and t.lower() == "product" for t in types)


def from_json_ld(html: str) -> Dict[str, Any]:
    found: Dict[str, Any] = {}
    for node in _json_ld_nodes(html):
        if not _is_product(node):
            continue
        if "title" not in found and isinstance(node.get("name"), str):
            found["title"] = node["name"]
        if "image_url" not in found:
            image = node.get("image")
            if isinstance(image, list) and image and isinstance(image[0], str):
                found["image_url"] = image[0]
            elif isinstance(image, str):
                found["image_url"] = image
        offers = node.get("offers")
        offer = offers[0] if isinstance(offers, list) and offers else offers
        if isinstance(offer, dict):
            if "price" not in found and offer.get("price") not in (None, ""):
                price = coerce_price(offer["price"])
                if price is not None:
                    found["price"] = price
            if "currency" not in found and isinstance(offer.get("priceCurrency"), str):
                found["currency"] = offer["priceCurrency"].upper()
        if found:
            return found
    return found


def price_from_meta(html: str) -> Dict[str, Any]:
    for attr, key in PRICE_META_CANDIDATES:
        raw = meta_content(html, attr, key)
        price = coerce_price(raw) if raw else None
        if price is None:
            continue
        currency = (
            meta_content(html, attr, key.replace("amount", "currency"))
            or meta_content(html, "property", "og:price:currency")
            or meta_content(html, "name", "priceCurrency")
        )
        return {"price": price, "currency": currency.upper() if currency else None}
    return {}


def extract_product_metadata(html: str) -> Dict[str, Any]:
    meta = from_json_ld(html)
    if not meta.get("title"):
        title_match = TITLE_RE.search(html)
        meta["title"] = (
            meta_content(html, "property", "og:title")
            or meta_content(html, "name", "twitter:title")
            or (title_match.group(1).strip() if title_match else None)
        )
    if not meta.get("image_url"):
        image_match = IMAGE_SRC_RE.search(html)
        meta["image_url"] = (
            meta_content(html, "property", "og:image")
            or meta_content(html, "name", "twitter:image")
            or (image_match.group(1).strip() if image_match else None)
        )
    if meta.get("price") is None:
        from_meta = price_from_meta(html)
        if from_meta:
            meta["price"] = from_meta["price"]
            if not meta.get("currency") and from_meta.get("currency"):
                meta["currency"] = from_meta["currency"]
    return {
        "title": meta.get("title"),
        "image_url": meta.get("image_url"),
        "price": meta.get("price"),
        "currency": meta.get("currency"),
    }
