"""
Report and PII-check schemas
"""
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field


class ReportCreate(BaseModel):
    """Schema for submitting an incident report"""
    event_id: int
    shift_id: int
    text: str = Field(..., min_length=1, max_length=10000)


class ReportResponse(BaseModel):
    """Stored report with its PII classification"""
    id: int
    event_id: int
    shift_id: int
    submitted_by: Optional[int]
    text: str
    has_potential_pii: bool
    detected_categories: List[str]
    pii_confidence: str
    created_at: datetime

    class Config:
        from_attributes = True


class PIICheckRequest(BaseModel):
    """Text to classify without storing it"""
    text: str = Field(..., max_length=10000)


class PIICheckResponse(BaseModel):
    """Classification result and the notice to show the author"""
    has_pii: bool
    detected_types: List[str]
    confidence: str
    warning: str
