"""
Invitation API Endpoints
Admin issuance plus the public accept/decline flow reached by token
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from awareness_api.core.errors import GovernanceError
from awareness_api.db.session import get_db
from awareness_api.models.user import User
from awareness_api.schemas.invitation import (
    InvitationCreate,
    InvitationResponse,
    InvitationAccept,
    InvitationDeclined,
)
from awareness_api.schemas.user import Token, UserResponse
from awareness_api.api.dependencies import get_current_user, governance
from awareness_api.services.governance import GovernanceFacade

router = APIRouter()


# ==================== ADMIN ====================

@router.post("", response_model=InvitationResponse, status_code=status.HTTP_201_CREATED)
async def send_invitation(
    invitation_data: InvitationCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    facade: GovernanceFacade = Depends(governance),
):
    """
    Issue an invitation (ADMIN only).
    """
    try:
        invitation = await facade.issue_invitation(
            db,
            email=invitation_data.email,
            role=invitation_data.role,
            issued_by=current_user.id,
        )
    except GovernanceError as e:
        raise e.to_http()

    return InvitationResponse.model_validate(invitation)


@router.get("", response_model=List[InvitationResponse])
async def list_pending_invitations(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    facade: GovernanceFacade = Depends(governance),
):
    """
    List pending invitations (ADMIN only). Lapsed ones are purged first.
    """
    try:
        invitations = await facade.list_invitations(db, requester_id=current_user.id)
    except GovernanceError as e:
        raise e.to_http()

    return [InvitationResponse.model_validate(inv) for inv in invitations]


# ==================== PUBLIC (token holder) ====================

@router.get("/{token}", response_model=InvitationResponse)
async def get_invitation(
    token: str,
    db: AsyncSession = Depends(get_db),
    facade: GovernanceFacade = Depends(governance),
):
    """
    Fetch a pending invitation by token (PUBLIC).
    """
    try:
        invitation = await facade.get_invitation(db, token)
    except GovernanceError as e:
        raise e.to_http()

    return InvitationResponse.model_validate(invitation)


@router.post("/{token}/accept", response_model=Token, status_code=status.HTTP_201_CREATED)
async def accept_invitation(
    token: str,
    accept_data: InvitationAccept,
    db: AsyncSession = Depends(get_db),
    facade: GovernanceFacade = Depends(governance),
):
    """
    Accept an invitation and register (PUBLIC). Single use.
    """
    try:
        user, access_token = await facade.accept_invitation(
            db, token, name=accept_data.name, password=accept_data.password
        )
    except GovernanceError as e:
        raise e.to_http()

    return Token(access_token=access_token, user=UserResponse.model_validate(user))


@router.post("/{token}/decline", response_model=InvitationDeclined)
async def decline_invitation(
    token: str,
    db: AsyncSession = Depends(get_db),
    facade: GovernanceFacade = Depends(governance),
):
    """
    Decline an invitation (PUBLIC). The invitation and its email are erased.
    """
    try:
        await facade.decline_invitation(db, token)
    except GovernanceError as e:
        raise e.to_http()

    return InvitationDeclined()
