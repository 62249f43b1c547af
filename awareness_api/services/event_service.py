"""
Event Service
Minimal event and shift management that anchors reports and retention
"""
import logging
from datetime import datetime
from typing import Iterable, Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from awareness_api.core.errors import ForbiddenError, InvalidPolicyError, NotFoundError
from awareness_api.models.event import Event, Shift
from awareness_api.models.user import User, UserRole, Capability
from awareness_api.services.user_directory import UserDirectory, get_user_directory

logger = logging.getLogger(__name__)


class EventService:
    """Creates events and staffs their shifts"""

    def __init__(self, directory: Optional[UserDirectory] = None):
        self.directory = directory or get_user_directory()

    async def get_event(self, db: AsyncSession, event_id: int) -> Event:
        result = await db.execute(select(Event).where(Event.id == event_id))
        event = result.scalar_one_or_none()
        if event is None:
            raise NotFoundError("Event not found")
        return event

    async def get_shift(self, db: AsyncSession, shift_id: int) -> Shift:
        result = await db.execute(select(Shift).where(Shift.id == shift_id))
        shift = result.scalar_one_or_none()
        if shift is None:
            raise NotFoundError("Shift not found")
        return shift

    async def create_event(
        self,
        db: AsyncSession,
        name: str,
        date: datetime,
        organizer_id: int,
        retention_days: Optional[int] = None,
    ) -> Event:
        """
        Raises:
            ForbiddenError: If the organizer may not run events
            InvalidPolicyError: If retention_days is given and not positive
        """
        if not await self.directory.has_capability(db, organizer_id, Capability.ORGANIZE_EVENTS):
            raise ForbiddenError("Only admins and organizers can create events")
        if retention_days is not None and (isinstance(retention_days, bool) or retention_days <= 0):
            raise InvalidPolicyError("retention_days must be a positive integer")

        event = Event(name=name, date=date, organizer_id=organizer_id, retention_days=retention_days)
        db.add(event)
        await db.commit()
        await db.refresh(event)
        logger.info(f"Event {event.id} created by user {organizer_id}")
        return event

    async def create_shift(
        self,
        db: AsyncSession,
        event_id: int,
        name: str,
        member_ids: Iterable[int],
        requester_id: int,
        start_time: Optional[datetime] = None,
        end_time: Optional[datetime] = None,
    ) -> Shift:
        """
        Raises:
            NotFoundError: If the event or one of the members does not exist
            ForbiddenError: If the requester is neither the event organizer nor an admin
        """
        event = await self.get_event(db, event_id)
        requester = await self.directory.get_user(db, requester_id)
        if requester is None or (event.organizer_id != requester.id and requester.role != UserRole.ADMIN):
            raise ForbiddenError("Only the event organizer can staff its shifts")

        member_ids = set(member_ids)
        members = []
        if member_ids:
            result = await db.execute(select(User).where(User.id.in_(member_ids)))
            members = list(result.scalars().all())
            if len(members) != len(member_ids):
                raise NotFoundError("Unknown team member")

        shift = Shift(event_id=event.id, name=name, start_time=start_time, end_time=end_time, members=members)
        db.add(shift)
        await db.commit()
        await db.refresh(shift)
        logger.info(f"Shift {shift.id} created for event {event.id} with {len(members)} members")
        return shift


# Singleton instance
_event_service: Optional[EventService] = None


def get_event_service() -> EventService:
    """Get or create the event service singleton"""
    global _event_service
    if _event_service is None:
        _event_service = EventService()
    return _event_service
