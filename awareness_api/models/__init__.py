"""
SQLAlchemy models - Import all so metadata is complete
"""
from awareness_api.models.base import Base, TimestampMixin

# Import all models
from awareness_api.models.user import User, UserRole, Capability
from awareness_api.models.invitation import Invitation, InvitationState, IssuedInvitationToken
from awareness_api.models.event import Event, Shift, shift_members
from awareness_api.models.report import Report
from awareness_api.models.retention import RetentionPolicy

# Export all for easy imports
__all__ = [
    "Base",
    "TimestampMixin",
    "User",
    "UserRole",
    "Capability",
    "Invitation",
    "InvitationState",
    "IssuedInvitationToken",
    "Event",
    "Shift",
    "shift_members",
    "Report",
    "RetentionPolicy",
]
