"""
Event and shift schemas
"""
from datetime import datetime, timezone
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Stored times are naive UTC; convert offset-aware input to that instant."""
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class EventCreate(BaseModel):
    """Schema for creating an event"""
    name: str = Field(..., min_length=1, max_length=255)
    date: datetime
    retention_days: Optional[int] = None

    @field_validator("date")
    @classmethod
    def normalize_date(cls, v: datetime) -> datetime:
        return to_naive_utc(v)


class EventResponse(BaseModel):
    """Response schema for events"""
    id: int
    name: str
    date: datetime
    organizer_id: Optional[int]
    retention_days: Optional[int]
    created_at: datetime

    class Config:
        from_attributes = True


class ShiftCreate(BaseModel):
    """Schema for creating a shift"""
    name: str = Field(..., min_length=1, max_length=255)
    member_ids: List[int] = Field(default_factory=list)
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def normalize_times(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(v)


class ShiftResponse(BaseModel):
    """Response schema for shifts"""
    id: int
    event_id: int
    name: str
    member_ids: List[int]
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None

    @classmethod
    def from_shift(cls, shift) -> "ShiftResponse":
        return cls(
            id=shift.id,
            event_id=shift.event_id,
            name=shift.name,
            member_ids=sorted(member.id for member in shift.members),
            start_time=shift.start_time,
            end_time=shift.end_time,
        )
