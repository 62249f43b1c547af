"""
GDPR settings endpoints
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from awareness_api.core.errors import GovernanceError
from awareness_api.db.session import get_db
from awareness_api.models.user import User
from awareness_api.schemas.retention import RetentionPolicyUpdate, RetentionPolicyResponse
from awareness_api.api.dependencies import get_current_user, governance
from awareness_api.services.governance import GovernanceFacade

router = APIRouter()


@router.get("/settings", response_model=RetentionPolicyResponse)
async def get_gdpr_settings(
    db: AsyncSession = Depends(get_db),
    facade: GovernanceFacade = Depends(governance),
):
    """
    Current retention policy (PUBLIC).
    """
    policy = await facade.get_retention_policy(db)
    return RetentionPolicyResponse.model_validate(policy)


@router.put("/settings", response_model=RetentionPolicyResponse)
async def update_gdpr_settings(
    policy_data: RetentionPolicyUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    facade: GovernanceFacade = Depends(governance),
):
    """
    Update the retention policy (ADMIN only). Omitted fields are unchanged.
    """
    try:
        policy = await facade.update_retention_policy(
            db,
            requester_id=current_user.id,
            **policy_data.model_dump(exclude_unset=True),
        )
    except GovernanceError as e:
        raise e.to_http()

    return RetentionPolicyResponse.model_validate(policy)
