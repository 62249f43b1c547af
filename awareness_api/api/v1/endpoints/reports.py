"""
Report API Endpoints
Submission with PII classification, and reads restricted to submitter and
event organizer
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from awareness_api.core.errors import GovernanceError
from awareness_api.db.session import get_db
from awareness_api.models.user import User
from awareness_api.schemas.report import (
    ReportCreate,
    ReportResponse,
    PIICheckRequest,
    PIICheckResponse,
)
from awareness_api.api.dependencies import get_current_user, governance
from awareness_api.services.governance import GovernanceFacade

router = APIRouter()


@router.post("", response_model=ReportResponse, status_code=status.HTTP_201_CREATED)
async def submit_report(
    report_data: ReportCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    facade: GovernanceFacade = Depends(governance),
):
    """
    Submit an incident report for a shift the caller is assigned to.
    """
    try:
        report = await facade.submit_report(
            db,
            event_id=report_data.event_id,
            shift_id=report_data.shift_id,
            submitted_by=current_user.id,
            text=report_data.text,
        )
    except GovernanceError as e:
        raise e.to_http()

    return ReportResponse.model_validate(report)


@router.post("/pii-check", response_model=PIICheckResponse)
async def check_for_pii(
    check_data: PIICheckRequest,
    current_user: User = Depends(get_current_user),
    facade: GovernanceFacade = Depends(governance),
):
    """
    Classify draft text for personal data without storing it.
    """
    result, warning = facade.check_text(check_data.text)
    return PIICheckResponse(
        has_pii=result.has_pii,
        detected_types=list(result.detected_types),
        confidence=result.confidence.value,
        warning=warning,
    )


@router.get("/mine", response_model=List[ReportResponse])
async def list_my_reports(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    facade: GovernanceFacade = Depends(governance),
):
    """
    Reports submitted by the caller.
    """
    reports = await facade.list_my_reports(db, requester_id=current_user.id)
    return [ReportResponse.model_validate(report) for report in reports]


@router.get("/{report_id}", response_model=ReportResponse)
async def get_report(
    report_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    facade: GovernanceFacade = Depends(governance),
):
    """
    A single report (submitter or event organizer only).
    """
    try:
        report = await facade.get_report(db, report_id, requester_id=current_user.id)
    except GovernanceError as e:
        raise e.to_http()

    return ReportResponse.model_validate(report)
