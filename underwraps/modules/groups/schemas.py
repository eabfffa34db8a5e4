from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class GroupCreate(BaseModel):
    name: str

    class Config:
        extra = "forbid"


class GroupResponse(BaseModel):
    id: str
    name: str
    owner_id: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class GroupCreateResponse(BaseModel):
    success: bool = True
    group: GroupResponse


class GroupMemberResponse(BaseModel):
    id: str
    group_id: str
    user_id: str
    name: Optional[str] = None
    email: str
    role: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class SuccessResponse(BaseModel):
    success: bool = True
