from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class SyncUserRequest(BaseModel):
    """Register or refresh a user verified by the external identity provider."""
    external_uid: str = Field(..., min_length=1, description="Identifier issued by the identity provider")
    email: str = Field(..., min_length=3, description="Email address")
    display_name: Optional[str] = Field(None, max_length=200)


class UserResponse(BaseModel):
    id: int
    external_uid: str
    email: str
    display_name: Optional[str] = None
    skill_level: str
    created_at: datetime
    last_login: Optional[datetime] = None

    class Config:
        from_attributes = True


class SyncUserResponse(BaseModel):
    success: bool = True
    user: UserResponse
    created: bool
