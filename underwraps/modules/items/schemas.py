from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class ItemFields(BaseModel):
    title: str = Field(..., max_length=500)
    url: Optional[str] = Field(default=None, max_length=2048)
    price: Optional[float] = Field(default=None, ge=0)
    currency: Optional[str] = Field(default=None, max_length=10)
    image_url: Optional[str] = Field(default=None, max_length=2048)
    note: Optional[str] = Field(default=None, max_length=1000)
    quantity: int = Field(default=1, ge=1)
    allow_multiple_claims: bool = False

    class Config:
        extra = "forbid"


class ItemCreate(ItemFields):
    wishlist_id: str


class ItemUpdate(ItemFields):
    pass


class ItemResponse(BaseModel):
    id: str
    wishlist_id: str
    title: str
    url: Optional[str] = None
    price: Optional[float] = None
    currency: Optional[str] = None
    image_url: Optional[str] = None
    note: Optional[str] = None
    quantity: int = 1
    allow_multiple_claims: bool = False
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ItemMutationResponse(BaseModel):
    success: bool = True
    item: ItemResponse
