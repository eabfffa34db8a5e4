from pydantic import BaseModel
from typing import Optional


class ProductMetadataRequest(BaseModel):
    url: str

    class Config:
        extra = "forbid"


class ProductMetadataResponse(BaseModel):
    success: bool = True
    title: Optional[str] = None
    price: Optional[float] = None
    currency: Optional[str] = None
    image_url: Optional[str] = None
