"""
Retention Policy Store
Source of truth for the retention window and the invitation lifetime
"""
import logging
from datetime import datetime
from typing import Optional
from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from awareness_api.core.config import settings
from awareness_api.core.errors import InvalidPolicyError
from awareness_api.models.event import Event
from awareness_api.models.retention import RetentionPolicy, POLICY_ROW_ID

logger = logging.getLogger(__name__)

# Dialects with INSERT ... ON CONFLICT DO NOTHING
_INSERTS = {
    "postgresql": postgresql_insert,
    "sqlite": sqlite_insert,
}


def _require_positive_int(field_name: str, value) -> int:
    # bool is an int subclass but never a valid window
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise InvalidPolicyError(f"{field_name} must be a positive integer")
    return value


class RetentionPolicyStore:
    """Reads and updates the singleton retention policy row"""

    def __init__(
        self,
        default_retention_days: int = settings.DEFAULT_RETENTION_DAYS,
        invitation_expiration_hours: int = settings.INVITATION_EXPIRATION_HOURS,
    ):
        self.seed_retention_days = _require_positive_int("default_retention_days", default_retention_days)
        self.seed_expiration_hours = _require_positive_int(
            "invitation_expiration_hours", invitation_expiration_hours
        )

    async def get(self, db: AsyncSession) -> RetentionPolicy:
        """
        Current policy. Never fails: a missing row is seeded from settings.
        """
        policy = await self._load(db)
        if policy is not None:
            return policy
        return await self._seed(db)

    @staticmethod
    async def _load(db: AsyncSession, refresh: bool = False) -> Optional[RetentionPolicy]:
        query = select(RetentionPolicy).where(RetentionPolicy.id == POLICY_ROW_ID)
        if refresh:
            query = query.execution_options(populate_existing=True)
        result = await db.execute(query)
        return result.scalar_one_or_none()

    async def _seed(self, db: AsyncSession) -> RetentionPolicy:
        """
        Insert the settings defaults unless another reader got there first,
        then return whichever row is stored.
        """
        insert = _INSERTS.get(db.get_bind().dialect.name)
        if insert is None:
            raise RuntimeError(f"Unsupported database dialect: {db.get_bind().dialect.name}")

        now = datetime.utcnow()
        result = await db.execute(
            insert(RetentionPolicy)
            .values(
                id=POLICY_ROW_ID,
                default_retention_days=self.seed_retention_days,
                invitation_expiration_hours=self.seed_expiration_hours,
                created_at=now,
                updated_at=now,
            )
            .on_conflict_do_nothing(index_elements=[RetentionPolicy.id])
        )
        if result.rowcount:
            logger.info(
                f"Retention policy seeded: {self.seed_retention_days} days, "
                f"invitations valid {self.seed_expiration_hours} hours"
            )
        return await self._load(db, refresh=True)

    async def update(
        self,
        db: AsyncSession,
        default_retention_days: Optional[int] = None,
        invitation_expiration_hours: Optional[int] = None,
        updated_by: Optional[int] = None,
    ) -> RetentionPolicy:
        """
        Apply a partial update. Fields left as None keep their value.

        Raises:
            InvalidPolicyError: If a provided value is not a positive integer
        """
        if default_retention_days is not None:
            _require_positive_int("default_retention_days", default_retention_days)
        if invitation_expiration_hours is not None:
            _require_positive_int("invitation_expiration_hours", invitation_expiration_hours)

        policy = await self.get(db)
        if default_retention_days is not None:
            policy.default_retention_days = default_retention_days
        if invitation_expiration_hours is not None:
            policy.invitation_expiration_hours = invitation_expiration_hours
        policy.updated_by = updated_by

        await db.commit()
        await db.refresh(policy)
        logger.info(
            f"Retention policy updated by user {updated_by}: "
            f"{policy.default_retention_days} days, invitations {policy.invitation_expiration_hours} hours"
        )
        return policy

    @staticmethod
    def retention_days_for(event: Event, policy: RetentionPolicy) -> int:
        """Event override if set, otherwise the global default"""
        return event.retention_days or policy.default_retention_days


# Singleton instance
_policy_store: Optional[RetentionPolicyStore] = None


def get_retention_policy_store() -> RetentionPolicyStore:
    """Get or create the retention policy store singleton"""
    global _policy_store
    if _policy_store is None:
        _policy_store = RetentionPolicyStore()
    return _policy_store
