"""
Events and shifts - the minimum needed to scope reports and retention
"""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Table
from sqlalchemy.orm import relationship

from awareness_api.models.base import Base, TimestampMixin


shift_members = Table(
    "shift_members",
    Base.metadata,
    Column("shift_id", Integer, ForeignKey("shifts.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)


class Event(Base, TimestampMixin):
    """Event run by an organizer; its date anchors the retention window"""
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    date = Column(DateTime, nullable=False)
    organizer_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    retention_days = Column(Integer, nullable=True)  # overrides the default policy

    # Relationships
    organizer = relationship("User")
    shifts = relationship("Shift", back_populates="event", cascade="all, delete-orphan")


class Shift(Base, TimestampMixin):
    """Shift within an event with its assigned team members"""
    __tablename__ = "shifts"

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    start_time = Column(DateTime, nullable=True)
    end_time = Column(DateTime, nullable=True)

    # Relationships
    event = relationship("Event", back_populates="shifts")
    members = relationship("User", secondary=shift_members, lazy="selectin")
