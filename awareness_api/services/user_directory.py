"""
User Directory
The user-store collaborator consumed by the invitation ledger and the
governance facade.
"""
import logging
from typing import Optional
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from awareness_api.core.errors import ConflictError
from awareness_api.models.user import User, UserRole, Capability
from awareness_api.services.auth_service import AuthService, auth_service

logger = logging.getLogger(__name__)


class UserDirectory:
    """Lookup, creation and capability checks for users"""

    def __init__(self, auth: AuthService = auth_service):
        self.auth = auth

    async def find_user_by_email(self, db: AsyncSession, email: str) -> Optional[User]:
        result = await db.execute(
            select(User).where(User.email == email.lower())
        )
        return result.scalar_one_or_none()

    async def get_user(self, db: AsyncSession, user_id: int) -> Optional[User]:
        result = await db.execute(
            select(User).where(User.id == user_id)
        )
        return result.scalar_one_or_none()

    async def create_user(
        self,
        db: AsyncSession,
        email: str,
        name: str,
        password_hash: str,
        role: UserRole,
        invited_by: Optional[int] = None,
    ) -> User:
        """
        Add a user inside the caller's transaction.

        The password must already be hashed so that the caller's critical
        section stays short.

        Raises:
            ConflictError: If the email is already registered
        """
        user = User(
            email=email.lower(),
            name=name,
            password_hash=password_hash,
            role=role,
            invited_by=invited_by,
        )
        db.add(user)
        try:
            await db.flush()
        except IntegrityError:
            raise ConflictError("User already exists")
        return user

    async def has_capability(self, db: AsyncSession, user_id: int, capability: Capability) -> bool:
        user = await self.get_user(db, user_id)
        return user is not None and user.has_capability(capability)

    async def ensure_admin(self, db: AsyncSession, email: str, password: str, name: str = "Admin") -> User:
        """Create the bootstrap admin once; later calls return the existing user."""
        existing = await self.find_user_by_email(db, email)
        if existing:
            return existing

        user = await self.create_user(
            db,
            email=email,
            name=name,
            password_hash=self.auth.hash_password(password),
            role=UserRole.ADMIN,
        )
        await db.commit()
        logger.info(f"Bootstrap admin created (user_id={user.id})")
        return user


# Singleton instance
_user_directory: Optional[UserDirectory] = None


def get_user_directory() -> UserDirectory:
    """Get or create the user directory singleton"""
    global _user_directory
    if _user_directory is None:
        _user_directory = UserDirectory()
    return _user_directory
