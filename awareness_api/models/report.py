"""
Incident reports
"""
from sqlalchemy import Column, Integer, String, Text, ForeignKey, Boolean, JSON

from awareness_api.models.base import Base, TimestampMixin


class Report(Base, TimestampMixin):
    """
    Incident report submitted for a shift.

    Immutable after creation; removed only by the retention sweep. The event
    reference is kept as a plain id so that reports of a deleted event stay
    behind as orphans for the sweep to purge.
    """
    __tablename__ = "reports"

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(Integer, nullable=False, index=True)
    shift_id = Column(Integer, nullable=False)
    submitted_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    text = Column(Text, nullable=False)

    # PII classification captured at submission time
    has_potential_pii = Column(Boolean, default=False, nullable=False)
    detected_categories = Column(JSON, nullable=False, default=list)
    pii_confidence = Column(String(10), nullable=False, default="low")

    def __repr__(self):
        return f"<Report(id={self.id}, event_id={self.event_id}, pii={self.has_potential_pii})>"
