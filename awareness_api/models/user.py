"""
User model and role/capability mapping
"""
from sqlalchemy import Column, Integer, String, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import relationship
import enum

from awareness_api.models.base import Base, TimestampMixin


class UserRole(str, enum.Enum):
    """User roles for RBAC"""
    ADMIN = "admin"  # Club administrator
    ORGANIZER = "organizer"  # Runs events, reads their reports
    TEAM_MEMBER = "team_member"  # Works shifts, submits reports


class Capability(str, enum.Enum):
    """Actions gated by role"""
    INVITE_MEMBERS = "invite_members"
    MANAGE_RETENTION = "manage_retention"
    ORGANIZE_EVENTS = "organize_events"


ROLE_CAPABILITIES = {
    UserRole.ADMIN: {Capability.INVITE_MEMBERS, Capability.MANAGE_RETENTION, Capability.ORGANIZE_EVENTS},
    UserRole.ORGANIZER: {Capability.ORGANIZE_EVENTS},
    UserRole.TEAM_MEMBER: set(),
}

# Only these roles can be granted through an invitation
INVITABLE_ROLES = (UserRole.ORGANIZER, UserRole.TEAM_MEMBER)


class User(Base, TimestampMixin):
    """
    User table - directory of everyone who can sign in
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    name = Column(String(200), nullable=False)
    role = Column(SQLEnum(UserRole), default=UserRole.TEAM_MEMBER, nullable=False)
    invited_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    # Relationships
    inviter = relationship("User", remote_side=[id])

    def has_capability(self, capability: Capability) -> bool:
        return capability in ROLE_CAPABILITIES.get(self.role, set())

    def __repr__(self):
        return f"<User(id={self.id}, role={self.role})>"
