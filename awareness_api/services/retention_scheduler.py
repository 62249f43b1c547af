"""
Retention purge scheduler
Periodically removes expired invitations and reports past their retention
window. Purges are destructive; there is no soft delete.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from awareness_api.core.config import settings
from awareness_api.models.event import Event
from awareness_api.models.report import Report
from awareness_api.models.retention import RetentionPolicy
from awareness_api.services.invitation_service import InvitationService
from awareness_api.services.retention_policy import RetentionPolicyStore

logger = logging.getLogger(__name__)

PURGE_JOB_ID = "retention_purge"


@dataclass
class PurgeResult:
    """Counts removed by one tick; None marks a sweep that failed"""
    invitations_removed: Optional[int] = 0
    reports_removed: Optional[int] = 0

    @property
    def succeeded(self) -> bool:
        return self.invitations_removed is not None and self.reports_removed is not None


def report_expiry(event: Event, policy: RetentionPolicy) -> datetime:
    """Moment at which an event's reports must be gone"""
    return event.date + timedelta(days=RetentionPolicyStore.retention_days_for(event, policy))


class RetentionPurgeScheduler:
    """Runs the invitation and report sweeps on a fixed interval"""

    def __init__(
        self,
        session_factory: async_sessionmaker,
        invitation_service: InvitationService,
        policy_store: RetentionPolicyStore,
        interval_minutes: int = settings.PURGE_INTERVAL_MINUTES,
        batch_size: int = settings.PURGE_BATCH_SIZE,
        clock: Callable[[], datetime] = datetime.utcnow,
    ):
        if interval_minutes <= 0 or batch_size <= 0:
            raise ValueError("Purge interval and batch size must be positive")
        self.session_factory = session_factory
        self.invitation_service = invitation_service
        self.policy_store = policy_store
        self.interval_minutes = interval_minutes
        self.batch_size = batch_size
        self.clock = clock
        self.scheduler: Optional[AsyncIOScheduler] = None

    async def sweep_reports(self, now: datetime) -> int:
        """
        Delete every report whose event's retention window has closed at
        ``now``, and every report whose event no longer exists.

        Reports are walked in id order, one committed transaction per batch.
        """
        removed = 0
        last_id = 0

        while True:
            async with self.session_factory() as db:
                policy = await self.policy_store.get(db)
                batch = await db.execute(
                    select(Report.id, Report.event_id)
                    .where(Report.id > last_id)
                    .order_by(Report.id)
                    .limit(self.batch_size)
                )
                rows = batch.all()
                if not rows:
                    await db.commit()
                    break

                last_id = rows[-1].id
                events = await self._load_events(db, {row.event_id for row in rows})
                expired_ids = [
                    row.id for row in rows
                    if row.event_id not in events
                    or now >= report_expiry(events[row.event_id], policy)
                ]

                if expired_ids:
                    result = await db.execute(
                        delete(Report)
                        .where(Report.id.in_(expired_ids))
                        .execution_options(synchronize_session=False)
                    )
                    removed += result.rowcount
                await db.commit()

            if len(rows) < self.batch_size:
                break

        if removed:
            logger.info(f"Report sweep: {removed} reports purged")
        else:
            logger.debug("Report sweep: nothing to purge")
        return removed

    @staticmethod
    async def _load_events(db: AsyncSession, event_ids: set) -> Dict[int, Event]:
        result = await db.execute(select(Event).where(Event.id.in_(event_ids)))
        return {event.id: event for event in result.scalars().all()}

    async def sweep_invitations(self, now: datetime) -> int:
        async with self.session_factory() as db:
            return await self.invitation_service.sweep_expired(db, now)

    async def run_once(self, now: Optional[datetime] = None) -> PurgeResult:
        """
        One tick: both sweeps, each guarded so a failure in one does not
        stop the other. Failures are logged and retried on the next tick.
        """
        now = now or self.clock()
        result = PurgeResult()

        try:
            result.invitations_removed = await self.sweep_invitations(now)
        except Exception:
            logger.exception("Invitation sweep failed; retrying next tick")
            result.invitations_removed = None

        try:
            result.reports_removed = await self.sweep_reports(now)
        except Exception:
            logger.exception("Report sweep failed; retrying next tick")
            result.reports_removed = None

        return result

    def start(self) -> None:
        """Schedule ``run_once`` on the running event loop"""
        if self.scheduler is not None:
            return

        self.scheduler = AsyncIOScheduler()
        self.scheduler.add_job(
            self.run_once,
            trigger=IntervalTrigger(minutes=self.interval_minutes),
            id=PURGE_JOB_ID,
            name="Purge expired invitations and reports",
            max_instances=1,
            coalesce=True,
            replace_existing=True,
        )
        self.scheduler.start()
        logger.info(f"Retention purge scheduled every {self.interval_minutes} minutes")

    def shutdown(self) -> None:
        """Stop scheduling; an in-flight tick keeps its committed batches"""
        if self.scheduler is None:
            return
        self.scheduler.shutdown(wait=False)
        self.scheduler = None
        logger.info("Retention purge scheduler stopped")

    @property
    def job_ids(self) -> List[str]:
        if self.scheduler is None:
            return []
        return [job.id for job in self.scheduler.get_jobs()]
