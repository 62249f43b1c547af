"""
Retention Policy Model
Singleton row holding the data-protection windows
"""
from sqlalchemy import Column, Integer, ForeignKey

from awareness_api.models.base import Base, TimestampMixin

POLICY_ROW_ID = 1


class RetentionPolicy(Base, TimestampMixin):
    """
    Global retention configuration.

    Events may override ``default_retention_days`` with their own value.
    """
    __tablename__ = "retention_policy"

    id = Column(Integer, primary_key=True, default=POLICY_ROW_ID)
    default_retention_days = Column(Integer, nullable=False)
    invitation_expiration_hours = Column(Integer, nullable=False)
    updated_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    def __repr__(self):
        return (
            f"<RetentionPolicy(days={self.default_retention_days}, "
            f"invite_hours={self.invitation_expiration_hours})>"
        )
