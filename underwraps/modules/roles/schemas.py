from pydantic import BaseModel
from typing import Literal, Optional


class RoleUpdate(BaseModel):
    """role=None removes the stored role; group_id=None targets global scope."""
    user_id: str
    group_id: Optional[str] = None
    role: Optional[Literal["owner", "admin", "member"]] = None

    class Config:
        extra = "forbid"


class RoleUpdateResponse(BaseModel):
    success: bool = True
    user_id: str
    group_id: Optional[str] = None
    role: Optional[str] = None
