from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import date, datetime


class WishlistCreate(BaseModel):
    group_id: str
    name: Optional[str] = Field(default=None, max_length=200)

    class Config:
        extra = "forbid"


class WishlistResponse(BaseModel):
    id: str
    user_id: str
    group_id: str
    name: str
    is_default: bool = False
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class WishlistCreateResponse(BaseModel):
    success: bool = True
    wishlist: WishlistResponse


class WishlistDeleteResponse(BaseModel):
    success: bool = True
    group_id: str


class ClaimView(BaseModel):
    id: str
    item_id: str
    claimer_id: str
    reveal_date: date
    note: Optional[str] = None
    created_at: Optional[datetime] = None


class ItemWithClaims(BaseModel):
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
    is_claimed: bool = False
    claims: List[ClaimView] = []


class WishlistDetailResponse(WishlistResponse):
    is_owner: bool = False
    items: List[ItemWithClaims] = []
