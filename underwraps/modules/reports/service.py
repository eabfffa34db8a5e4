"""
Content-Security-Policy violation reports.

Accepts the Reporting API format (application/reports+json, a list of
reports) and the legacy format (application/csp-report or application/json,
{"csp-report": {...}}). Reports caused by browser extensions are dropped.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

EXTENSION_SCHEMES = ("chrome-extension://", "moz-extension://")


def is_extension_noise(body: Any) -> bool:
    if not isinstance(body, dict):
        return False
    blocked = body.get("blocked-uri") or body.get("blockedURL")
    return isinstance(blocked, str) and blocked.startswith(EXTENSION_SCHEMES)


def parse_csp_reports(
    content_type: str,
    raw: bytes,
    client_ip: str = "unknown",
    user_agent: str = "",
) -> List[Dict[str, Any]]:
    content_type = (content_type or "").lower()
    received_at = datetime.now(timezone.utc).isoformat()
    reports = []

    if "application/reports+json" in content_type:
        payload = json.loads(raw or b"null")
        for report in payload if isinstance(payload, list) else []:
            if not isinstance(report, dict) or is_extension_noise(report.get("body")):
                continue
            reports.append({
                "received_at": received_at,
                "ip": client_ip,
                "user_agent": user_agent,
                "type": report.get("type") or "csp-violation",
                "url": report.get("url"),
                "body": report.get("body"),
            })
    elif "application/csp-report" in content_type or "application/json" in content_type:
        payload = json.loads(raw or b"null")
        body = payload.get("csp-report", payload) if isinstance(payload, dict) else payload
        if not is_extension_noise(body):
            reports.append({
                "received_at": received_at,
                "ip": client_ip,
                "user_agent": user_agent,
                "type": "csp-violation",
                "body": body,
            })
    return reports


def record_csp_reports(
    content_type: str,
    raw: bytes,
    client_ip: str = "unknown",
    user_agent: str = "",
) -> int:
    """Log every kept report. Returns how many were kept; malformed payloads count as zero."""
    try:
        reports = parse_csp_reports(content_type, raw, client_ip, user_agent)
    except (ValueError, RecursionError) as e:
        logger.warning("Unparseable CSP report: %s", type(e).__name__)
        return 0
    for report in reports:
        logger.info("CSP report: %s", json.dumps(report, default=str))
    return len(reports)


def client_ip_from(forwarded_for: Optional[str], fallback: Optional[str]) -> str:
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    return fallback or "unknown"
