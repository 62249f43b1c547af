"""
PyTest configuration and fixtures for Awareness Reporting API tests
"""
import pytest
import pytest_asyncio
from datetime import datetime
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from awareness_api.main import app
from awareness_api.db.session import get_db
from awareness_api.models import Base, User, UserRole, Event, Shift
from awareness_api.api.dependencies import governance
from awareness_api.services.auth_service import auth_service
from awareness_api.services.event_service import EventService
from awareness_api.services.governance import GovernanceFacade
from awareness_api.services.invitation_service import InvitationService
from awareness_api.services.retention_policy import RetentionPolicyStore
from awareness_api.services.user_directory import UserDirectory


# Test database setup - Using async SQLite with aiosqlite
SQLALCHEMY_TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

PASSWORD = "Secret123!"
# bcrypt is slow; hash once for every fixture user
PASSWORD_HASH = auth_service.hash_password(PASSWORD)

NOW = datetime(2024, 1, 1, 0, 0, 0)


@pytest_asyncio.fixture
async def engine():
    """Fresh in-memory database per test"""
    engine = create_async_engine(
        SQLALCHEMY_TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def policy_store():
    return RetentionPolicyStore(default_retention_days=90, invitation_expiration_hours=72)


@pytest.fixture
def directory():
    return UserDirectory()


@pytest.fixture
def invitation_service(directory, policy_store):
    return InvitationService(directory=directory, policy_store=policy_store)


@pytest.fixture
def facade(invitation_service, policy_store, directory):
    return GovernanceFacade(
        invitations=invitation_service,
        policy_store=policy_store,
        directory=directory,
        events=EventService(directory=directory),
        clock=lambda: NOW,
    )


async def make_user(db_session, email: str, name: str, role: UserRole) -> User:
    user = User(email=email, name=name, role=role, password_hash=PASSWORD_HASH)
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest_asyncio.fixture
async def admin_user(db_session):
    return await make_user(db_session, "admin@club.org", "Admin User", UserRole.ADMIN)


@pytest_asyncio.fixture
async def organizer_user(db_session):
    return await make_user(db_session, "sarah.organizer@club.org", "Sarah Martinez", UserRole.ORGANIZER)


@pytest_asyncio.fixture
async def other_organizer(db_session):
    return await make_user(db_session, "mike.events@club.org", "Mike Johnson", UserRole.ORGANIZER)


@pytest_asyncio.fixture
async def member_user(db_session):
    return await make_user(db_session, "alex.member@club.org", "Alex Thompson", UserRole.TEAM_MEMBER)


@pytest_asyncio.fixture
async def other_member(db_session):
    return await make_user(db_session, "jordan.smith@club.org", "Jordan Smith", UserRole.TEAM_MEMBER)


@pytest_asyncio.fixture
async def event(db_session, organizer_user):
    """Event dated 2024-01-01 with a 30-day retention override"""
    event = Event(name="Summer Festival", date=NOW, organizer_id=organizer_user.id, retention_days=30)
    db_session.add(event)
    await db_session.commit()
    await db_session.refresh(event)
    return event


@pytest_asyncio.fixture
async def shift(db_session, event, member_user):
    """Shift of ``event`` staffed by ``member_user`` only"""
    shift = Shift(event_id=event.id, name="Entrance", members=[member_user])
    db_session.add(shift)
    await db_session.commit()
    await db_session.refresh(shift)
    return shift


def auth_headers_for(user: User) -> dict:
    return {"Authorization": f"Bearer {auth_service.create_user_token(user)}"}


@pytest_asyncio.fixture
async def client(session_factory, facade):
    """
    HTTP client against the app with the test database and facade.
    """
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[governance] = lambda: facade

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
