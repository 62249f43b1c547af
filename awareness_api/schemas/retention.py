"""
Retention policy schemas
"""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel


class RetentionPolicyUpdate(BaseModel):
    """
    Partial update. Values are validated by the policy store so that a bad
    value surfaces as an invalid-policy error rather than a schema error.
    """
    default_retention_days: Optional[int] = None
    invitation_expiration_hours: Optional[int] = None


class RetentionPolicyResponse(BaseModel):
    """Current retention policy"""
    default_retention_days: int
    invitation_expiration_hours: int
    updated_by: Optional[int] = None
    updated_at: datetime

    class Config:
        from_attributes = True
