from pydantic import BaseModel, EmailStr
from typing import Optional


class InvitationCreate(BaseModel):
    group_id: str
    invitee_email: EmailStr

    class Config:
        extra = "forbid"


class InvitationCreateResponse(BaseModel):
    success: bool = True
    invitation_id: str
    invitation_link: str
    expires_at: str


class InvitationValidateRequest(BaseModel):
    token: str

    class Config:
        extra = "forbid"


class InvitationPublic(BaseModel):
    id: str
    group_id: str
    group_name: Optional[str] = None
    invitee_email: Optional[str] = None
    status: str
    expires_at: Optional[str] = None
    is_valid: bool
    is_expired: bool


class InvitationValidateResponse(BaseModel):
    success: bool = True
    invitation: InvitationPublic


class InvitationAcceptResponse(BaseModel):
    success: bool = True
    group_id: str
    already_member: bool = False
