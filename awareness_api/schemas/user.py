"""
Pydantic schemas for User endpoints
"""
from pydantic import BaseModel, EmailStr
from typing import Optional
from datetime import datetime
from awareness_api.models.user import UserRole


class UserLogin(BaseModel):
    """Schema for login credentials"""
    email: EmailStr
    password: str


class UserResponse(BaseModel):
    """Response schema for users"""
    id: int
    email: EmailStr
    name: str
    role: UserRole
    invited_by: Optional[int] = None
    created_at: datetime

    class Config:
        from_attributes = True


class Token(BaseModel):
    """Access token with the signed-in user"""
    access_token: str
    token_type: str = "bearer"
    user: UserResponse
