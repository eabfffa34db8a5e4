from fastapi import APIRouter, Depends, Request
from underwraps.config.settings import settings
from underwraps.modules.metadata.schemas import ProductMetadataRequest, ProductMetadataResponse
from underwraps.modules.metadata.service import MetadataService
from underwraps.core.dependencies import RequestContext, get_request_context
from underwraps.core.rate_limit import limiter

router = APIRouter(prefix="/metadata", tags=["metadata"])


def get_metadata_service() -> MetadataService:
    return MetadataService()


@router.post("", response_model=ProductMetadataResponse)
@limiter.limit(settings.public_rate_limit)
async def fetch_product_metadata(
    request: Request,
    data: ProductMetadataRequest,
    ctx: RequestContext = Depends(get_request_context),
    service: MetadataService = Depends(get_metadata_service)
):
    """Fetch title, image and price for a product page URL"""
    return await service.fetch_product_metadata(data.url)
