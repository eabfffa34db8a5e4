from pydantic import BaseModel, Field
from typing import Optional
from datetime import date, datetime


class ClaimCreate(BaseModel):
    item_id: str
    group_id: Optional[str] = None
    reveal_date: date
    note: Optional[str] = Field(default=None, max_length=1000)

    class Config:
        extra = "forbid"


class ClaimResponse(BaseModel):
    id: str
    item_id: str
    claimer_id: str
    group_id: str
    reveal_date: date
    note: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ClaimCreateResponse(BaseModel):
    success: bool = True
    claim_id: str
