"""
Invitation Service
Owns the invitation ledger: issuance, single-use acceptance, decline
(erasure) and expiry.
"""
import hashlib
import logging
import secrets
from datetime import datetime, timedelta
from typing import List, Optional
from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from awareness_api.core.errors import (
    AlreadyProcessedError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
)
from awareness_api.models.invitation import Invitation, InvitationState, IssuedInvitationToken
from awareness_api.models.user import User, UserRole, INVITABLE_ROLES
from awareness_api.services.auth_service import AuthService, auth_service
from awareness_api.services.invitation_state import ensure_pending, transition
from awareness_api.services.retention_policy import RetentionPolicyStore, get_retention_policy_store
from awareness_api.services.user_directory import UserDirectory, get_user_directory

logger = logging.getLogger(__name__)

TOKEN_BYTES = 32
MAX_TOKEN_ATTEMPTS = 5


def token_digest(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


class InvitationService:
    """Service for managing the invitation ledger"""

    def __init__(
        self,
        directory: Optional[UserDirectory] = None,
        policy_store: Optional[RetentionPolicyStore] = None,
        auth: AuthService = auth_service,
    ):
        self.directory = directory or get_user_directory()
        self.policy_store = policy_store or get_retention_policy_store()
        self.auth = auth

    def generate_token(self) -> str:
        """
        Generate a cryptographically secure invitation token.

        Returns:
            URL-safe token string (43 characters)
        """
        return secrets.token_urlsafe(TOKEN_BYTES)

    async def _reserve_token(self, db: AsyncSession, now: datetime) -> str:
        """Draw a token that has never been issued and record its digest."""
        for _ in range(MAX_TOKEN_ATTEMPTS):
            token = self.generate_token()
            digest = token_digest(token)
            existing = await db.execute(
                select(IssuedInvitationToken.id).where(IssuedInvitationToken.token_digest == digest)
            )
            if existing.scalar_one_or_none() is None:
                db.add(IssuedInvitationToken(token_digest=digest, issued_at=now))
                return token
        raise RuntimeError("Could not generate a unique invitation token")

    async def _get_by_token(self, db: AsyncSession, token: str) -> Optional[Invitation]:
        result = await db.execute(
            select(Invitation)
            .where(Invitation.token == token)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def issue(
        self,
        db: AsyncSession,
        email: str,
        role: UserRole,
        issued_by: int,
        now: datetime,
    ) -> Invitation:
        """
        Create a pending invitation.

        Args:
            db: Database session
            email: Address to invite
            role: Role granted on acceptance (organizer or team_member)
            issued_by: User ID of the admin issuing the invitation
            now: Issuance time (naive UTC)

        Returns:
            Created Invitation object

        Raises:
            ForbiddenError: If the role cannot be granted by invitation
            ConflictError: If a user with this email already exists
        """
        try:
            role = UserRole(role)
        except ValueError:
            raise ForbiddenError(f"Role '{role}' cannot be granted by invitation")
        if role not in INVITABLE_ROLES:
            raise ForbiddenError(f"Role '{role.value}' cannot be granted by invitation")

        email = email.strip().lower()
        if await self.directory.find_user_by_email(db, email):
            raise ConflictError("User already exists")

        policy = await self.policy_store.get(db)
        token = await self._reserve_token(db, now)

        invitation = Invitation(
            email=email,
            role=role,
            token=token,
            issued_by=issued_by,
            issued_at=now,
            expires_at=now + timedelta(hours=policy.invitation_expiration_hours),
            state=InvitationState.PENDING,
        )
        db.add(invitation)
        await db.commit()
        await db.refresh(invitation)

        logger.info(f"Invitation {invitation.id} issued by user {issued_by}, expires {invitation.expires_at.isoformat()}")
        return invitation

    async def lookup(self, db: AsyncSession, token: str, now: datetime) -> Invitation:
        """
        Fetch a pending invitation by token.

        Raises:
            NotFoundError: If no invitation has this token
            ExpiredError: If the invitation lapsed before ``now``
            AlreadyProcessedError: If it was already accepted or declined
        """
        invitation = await self._get_by_token(db, token)
        if invitation is None:
            raise NotFoundError("Invitation not found")

        ensure_pending(invitation, now)
        return invitation

    async def accept(
        self,
        db: AsyncSession,
        token: str,
        name: str,
        password: str,
        now: datetime,
    ) -> User:
        """
        Consume an invitation and register its user. At most one caller wins.

        The PENDING -> ACCEPTED move is a single conditional UPDATE; the user
        row is created in the same transaction, so a losing or failing caller
        leaves neither behind.

        Raises:
            NotFoundError, ExpiredError, AlreadyProcessedError: As for ``lookup``
            ConflictError: If the email was registered since the invitation was issued
        """
        # Hash outside the transaction to keep the write lock short
        password_hash = self.auth.hash_password(password)

        result = await db.execute(
            transition(InvitationState.ACCEPTED, now, Invitation.token == token)
        )
        if result.rowcount != 1:
            await db.rollback()
            await self.lookup(db, token, now)
            # Still pending after a failed swap: another caller holds it
            raise AlreadyProcessedError()

        invitation = await self._get_by_token(db, token)
        try:
            user = await self.directory.create_user(
                db,
                email=invitation.email,
                name=name,
                password_hash=password_hash,
                role=invitation.role,
                invited_by=invitation.issued_by,
            )
        except ConflictError:
            await db.rollback()
            raise

        await db.commit()
        await db.refresh(user)

        logger.info(f"Invitation {invitation.id} accepted, user {user.id} created")
        return user

    async def decline(self, db: AsyncSession, token: str, now: datetime) -> None:
        """
        Decline an invitation and erase it, email address included.

        A lapsed but still pending invitation can be declined; erasure is
        honoured regardless of expiry.

        Raises:
            NotFoundError: If no invitation has this token
            AlreadyProcessedError: If it was already accepted
        """
        result = await db.execute(
            transition(InvitationState.DECLINED, now, Invitation.token == token, require_live=False)
        )
        if result.rowcount != 1:
            await db.rollback()
            if await self._get_by_token(db, token) is None:
                raise NotFoundError("Invitation not found")
            raise AlreadyProcessedError()

        await db.execute(
            delete(Invitation)
            .where(Invitation.token == token, Invitation.state == InvitationState.DECLINED)
            .execution_options(synchronize_session=False)
        )
        await db.commit()
        logger.info("Invitation declined and erased")

    async def sweep_expired(self, db: AsyncSession, now: datetime) -> int:
        """
        Expire lapsed pending invitations and purge every invitation whose
        lifetime ended before ``now``.

        Returns:
            Number of invitation rows removed (0 on a repeated run)
        """
        expired = await db.execute(transition(InvitationState.EXPIRED, now))
        removed = await db.execute(
            delete(Invitation)
            .where(
                Invitation.expires_at < now,
                Invitation.state.in_([InvitationState.EXPIRED, InvitationState.ACCEPTED]),
            )
            .execution_options(synchronize_session=False)
        )
        await db.commit()

        if removed.rowcount:
            logger.info(f"Invitation sweep: {expired.rowcount} expired, {removed.rowcount} removed")
        else:
            logger.debug("Invitation sweep: nothing to remove")
        return removed.rowcount

    async def list_pending(self, db: AsyncSession, now: datetime) -> List[Invitation]:
        """
        Pending invitations, newest first. Lapsed ones are swept first.
        """
        await self.sweep_expired(db, now)
        result = await db.execute(
            select(Invitation)
            .where(Invitation.state == InvitationState.PENDING)
            .order_by(Invitation.issued_at.desc(), Invitation.id.desc())
        )
        return list(result.scalars().all())


# Singleton instance
_invitation_service: Optional[InvitationService] = None


def get_invitation_service() -> InvitationService:
    """Get or create the invitation service singleton"""
    global _invitation_service
    if _invitation_service is None:
        _invitation_service = InvitationService()
    return _invitation_service
