"""
Invitation Model
Time-limited, single-use invitations that onboard organizers and team members
"""
import enum
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import relationship

from awareness_api.models.base import Base, TimestampMixin
from awareness_api.models.user import UserRole


class InvitationState(str, enum.Enum):
    """Lifecycle states; every state but PENDING is terminal"""
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    EXPIRED = "expired"


class Invitation(Base, TimestampMixin):
    """
    User invitation sent by an admin.

    The email address is personal data: the row is erased on decline and
    purged by the retention sweep once ``expires_at`` has passed.
    """
    __tablename__ = "invitations"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), nullable=False, index=True)
    role = Column(SQLEnum(UserRole), nullable=False)
    token = Column(String(255), unique=True, nullable=False, index=True)
    issued_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    issued_at = Column(DateTime, nullable=False)
    expires_at = Column(DateTime, nullable=False, index=True)
    state = Column(SQLEnum(InvitationState), default=InvitationState.PENDING, nullable=False, index=True)
    accepted_at = Column(DateTime, nullable=True)

    # Relationships
    issuer = relationship("User", foreign_keys=[issued_by])

    def __repr__(self):
        return f"<Invitation(id={self.id}, role={self.role}, state={self.state})>"


class IssuedInvitationToken(Base):
    """
    Digest of every invitation token ever handed out.

    Outlives the invitation row so that a purged or erased token can never be
    issued again. Holds no personal data.
    """
    __tablename__ = "issued_invitation_tokens"

    id = Column(Integer, primary_key=True)
    token_digest = Column(String(64), unique=True, nullable=False, index=True)
    issued_at = Column(DateTime, nullable=False)
