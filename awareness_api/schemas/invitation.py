"""
Invitation Schemas
Pydantic models for invitation validation
"""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, EmailStr, Field

from awareness_api.models.invitation import InvitationState
from awareness_api.models.user import UserRole


class InvitationCreate(BaseModel):
    """Schema for creating an invitation"""
    email: EmailStr
    role: UserRole = UserRole.TEAM_MEMBER


class InvitationResponse(BaseModel):
    """Schema for invitation response"""
    id: int
    email: EmailStr
    role: UserRole
    token: str
    issued_by: Optional[int]
    issued_at: datetime
    expires_at: datetime
    state: InvitationState

    class Config:
        from_attributes = True


class InvitationAccept(BaseModel):
    """Schema for accepting an invitation"""
    name: str = Field(..., min_length=1, max_length=200)
    password: str = Field(..., min_length=8, description="Password must be at least 8 characters")


class InvitationDeclined(BaseModel):
    """Confirmation that an invitation was erased"""
    message: str = "Invitation declined and email removed"
