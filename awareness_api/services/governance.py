"""
Governance Facade
Single entry point for the API layer into invitations, retention and
reports. Every authorization rule of the data-governance core is enforced
here.
"""
import logging
from datetime import datetime
from typing import Callable, List, Optional, Tuple
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from awareness_api.core.errors import ForbiddenError, NotFoundError
from awareness_api.models.event import Event
from awareness_api.models.invitation import Invitation
from awareness_api.models.report import Report
from awareness_api.models.retention import RetentionPolicy
from awareness_api.models.user import User, UserRole, Capability
from awareness_api.services.auth_service import AuthService, auth_service
from awareness_api.services.event_service import EventService, get_event_service
from awareness_api.services.invitation_service import InvitationService, get_invitation_service
from awareness_api.services.pii_classifier import (
    PIIClassifier,
    PIIDetectionResult,
    default_classifier,
    warning_message,
)
from awareness_api.services.retention_policy import RetentionPolicyStore, get_retention_policy_store
from awareness_api.services.user_directory import UserDirectory, get_user_directory

logger = logging.getLogger(__name__)


class GovernanceFacade:
    """Composes the ledger, policy store, classifier and report store"""

    def __init__(
        self,
        invitations: Optional[InvitationService] = None,
        policy_store: Optional[RetentionPolicyStore] = None,
        directory: Optional[UserDirectory] = None,
        events: Optional[EventService] = None,
        classifier: PIIClassifier = default_classifier,
        auth: AuthService = auth_service,
        clock: Callable[[], datetime] = datetime.utcnow,
    ):
        self.invitations = invitations or get_invitation_service()
        self.policy_store = policy_store or get_retention_policy_store()
        self.directory = directory or get_user_directory()
        self.events = events or get_event_service()
        self.classifier = classifier
        self.auth = auth
        self.clock = clock

    async def _require(self, db: AsyncSession, user_id: int, capability: Capability, message: str) -> None:
        if not await self.directory.has_capability(db, user_id, capability):
            raise ForbiddenError(message)

    # ==================== INVITATIONS ====================

    async def issue_invitation(
        self,
        db: AsyncSession,
        email: str,
        role: UserRole,
        issued_by: int,
        now: Optional[datetime] = None,
    ) -> Invitation:
        await self._require(db, issued_by, Capability.INVITE_MEMBERS, "Only admins can send invitations")
        return await self.invitations.issue(db, email, role, issued_by, now or self.clock())

    async def get_invitation(self, db: AsyncSession, token: str, now: Optional[datetime] = None) -> Invitation:
        return await self.invitations.lookup(db, token, now or self.clock())

    async def accept_invitation(
        self,
        db: AsyncSession,
        token: str,
        name: str,
        password: str,
        now: Optional[datetime] = None,
    ) -> Tuple[User, str]:
        """Register the invited user and open a session for them"""
        user = await self.invitations.accept(db, token, name, password, now or self.clock())
        return user, self.auth.create_user_token(user)

    async def decline_invitation(self, db: AsyncSession, token: str, now: Optional[datetime] = None) -> None:
        await self.invitations.decline(db, token, now or self.clock())

    async def list_invitations(
        self,
        db: AsyncSession,
        requester_id: int,
        now: Optional[datetime] = None,
    ) -> List[Invitation]:
        await self._require(db, requester_id, Capability.INVITE_MEMBERS, "Only admins can view invitations")
        return await self.invitations.list_pending(db, now or self.clock())

    # ==================== RETENTION POLICY ====================

    async def get_retention_policy(self, db: AsyncSession) -> RetentionPolicy:
        policy = await self.policy_store.get(db)
        await db.commit()
        return policy

    async def update_retention_policy(
        self,
        db: AsyncSession,
        requester_id: int,
        default_retention_days: Optional[int] = None,
        invitation_expiration_hours: Optional[int] = None,
    ) -> RetentionPolicy:
        await self._require(
            db, requester_id, Capability.MANAGE_RETENTION, "Only admins can update GDPR settings"
        )
        return await self.policy_store.update(
            db,
            default_retention_days=default_retention_days,
            invitation_expiration_hours=invitation_expiration_hours,
            updated_by=requester_id,
        )

    # ==================== REPORTS ====================

    def check_text(self, text: str) -> Tuple[PIIDetectionResult, str]:
        """Classify without persisting; returns the result and its warning"""
        result = self.classifier.classify(text)
        return result, warning_message(result)

    async def submit_report(
        self,
        db: AsyncSession,
        event_id: int,
        shift_id: int,
        submitted_by: int,
        text: str,
    ) -> Report:
        """
        Persist a report for a shift the submitter is assigned to, with its
        PII classification attached.

        Raises:
            NotFoundError: If the shift or event does not exist
            ForbiddenError: If the submitter is not assigned to the shift
        """
        shift = await self.events.get_shift(db, shift_id)
        if shift.event_id != event_id:
            raise NotFoundError("Shift not found")
        await self.events.get_event(db, event_id)

        if submitted_by not in {member.id for member in shift.members}:
            raise ForbiddenError("User not assigned to this shift")

        detection = self.classifier.classify(text)
        report = Report(
            event_id=event_id,
            shift_id=shift_id,
            submitted_by=submitted_by,
            text=text,
            has_potential_pii=detection.has_pii,
            detected_categories=list(detection.detected_types),
            pii_confidence=detection.confidence.value,
        )
        db.add(report)
        await db.commit()
        await db.refresh(report)

        if detection.has_pii:
            logger.info(
                f"Report {report.id} stored with potential PII "
                f"({', '.join(detection.detected_types)}; {detection.confidence.value})"
            )
        return report

    async def list_event_reports(self, db: AsyncSession, event_id: int, requester_id: int) -> List[Report]:
        """
        All reports of an event. Only that event's organizer may read them.

        Raises:
            NotFoundError: If the event does not exist
            ForbiddenError: If the requester does not organize the event
        """
        event = await self.events.get_event(db, event_id)
        if event.organizer_id != requester_id:
            raise ForbiddenError("Only event organizer can view reports")

        result = await db.execute(
            select(Report).where(Report.event_id == event_id).order_by(Report.created_at, Report.id)
        )
        return list(result.scalars().all())

    async def list_my_reports(self, db: AsyncSession, requester_id: int) -> List[Report]:
        result = await db.execute(
            select(Report).where(Report.submitted_by == requester_id).order_by(Report.created_at, Report.id)
        )
        return list(result.scalars().all())

    async def get_report(self, db: AsyncSession, report_id: int, requester_id: int) -> Report:
        """
        Raises:
            NotFoundError: If the report does not exist (or was just purged)
            ForbiddenError: If the requester is neither submitter nor event organizer
        """
        result = await db.execute(select(Report).where(Report.id == report_id))
        report = result.scalar_one_or_none()
        if report is None:
            raise NotFoundError("Report not found")

        if report.submitted_by == requester_id:
            return report

        event_result = await db.execute(select(Event.organizer_id).where(Event.id == report.event_id))
        organizer_id = event_result.scalar_one_or_none()
        if organizer_id is None or organizer_id != requester_id:
            raise ForbiddenError("Report is visible only to its submitter and the event organizer")
        return report


# Singleton instance
_governance: Optional[GovernanceFacade] = None


def get_governance() -> GovernanceFacade:
    """Get or create the governance facade singleton"""
    global _governance
    if _governance is None:
        _governance = GovernanceFacade()
    return _governance
