"""
Event API Endpoints
Event/shift creation and the organizer's report listing
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from awareness_api.core.errors import GovernanceError
from awareness_api.db.session import get_db
from awareness_api.models.user import User
from awareness_api.schemas.event import EventCreate, EventResponse, ShiftCreate, ShiftResponse
from awareness_api.schemas.report import ReportResponse
from awareness_api.api.dependencies import get_current_user, governance
from awareness_api.services.governance import GovernanceFacade

router = APIRouter()


@router.post("", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
async def create_event(
    event_data: EventCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    facade: GovernanceFacade = Depends(governance),
):
    """
    Create an event organized by the caller (ADMIN or ORGANIZER).
    """
    try:
        event = await facade.events.create_event(
            db,
            name=event_data.name,
            date=event_data.date,
            organizer_id=current_user.id,
            retention_days=event_data.retention_days,
        )
    except GovernanceError as e:
        raise e.to_http()

    return EventResponse.model_validate(event)


@router.post("/{event_id}/shifts", response_model=ShiftResponse, status_code=status.HTTP_201_CREATED)
async def create_shift(
    event_id: int,
    shift_data: ShiftCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    facade: GovernanceFacade = Depends(governance),
):
    """
    Create a shift and assign its team members (event organizer or ADMIN).
    """
    try:
        shift = await facade.events.create_shift(
            db,
            event_id=event_id,
            name=shift_data.name,
            member_ids=shift_data.member_ids,
            requester_id=current_user.id,
            start_time=shift_data.start_time,
            end_time=shift_data.end_time,
        )
    except GovernanceError as e:
        raise e.to_http()

    return ShiftResponse.from_shift(shift)


@router.get("/{event_id}/reports", response_model=List[ReportResponse])
async def list_event_reports(
    event_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    facade: GovernanceFacade = Depends(governance),
):
    """
    All reports of an event (that event's organizer only).
    """
    try:
        reports = await facade.list_event_reports(db, event_id, requester_id=current_user.id)
    except GovernanceError as e:
        raise e.to_http()

    return [ReportResponse.model_validate(report) for report in reports]
