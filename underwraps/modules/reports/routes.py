from fastapi import APIRouter, Request, Response
from underwraps.modules.reports.service import client_ip_from, record_csp_reports

router = APIRouter(tags=["reports"])


@router.post("/csp-report", status_code=204)
async def csp_report(request: Request):
    """Receive CSP violation reports; always answers 204"""
    raw = await request.body()
    record_csp_reports(
        request.headers.get("content-type", ""),
        raw,
        client_ip=client_ip_from(
            request.headers.get("x-forwarded-for") or request.headers.get("cf-connecting-ip"),
            request.client.host if request.client else None,
        ),
        user_agent=request.headers.get("user-agent", ""),
    )
    return Response(status_code=204)
