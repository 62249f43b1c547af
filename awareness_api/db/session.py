"""
Database session configuration
"""
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine, AsyncSession, async_sessionmaker
from awareness_api.core.config import settings


def _engine_options(url: str) -> dict:
    # SQLite does not take pool sizing arguments
    if url.startswith("sqlite"):
        return {}
    return {"pool_pre_ping": True, "pool_size": 10, "max_overflow": 20}


def enable_sqlite_immediate_transactions(async_engine: AsyncEngine) -> AsyncEngine:
    """
    Make every SQLite transaction take the write lock at BEGIN.

    The driver otherwise begins lazily, and two connections that both read
    before writing can deadlock instead of waiting on each other. Only for
    file databases where each session owns its connection.
    """
    @event.listens_for(async_engine.sync_engine, "connect")
    def _disable_driver_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(async_engine.sync_engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    return async_engine


# Create async engine
engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DB_ECHO,
    future=True,
    **_engine_options(settings.DATABASE_URL),
)
if settings.DATABASE_URL.startswith("sqlite") and ":memory:" not in settings.DATABASE_URL:
    enable_sqlite_immediate_transactions(engine)

# Create session maker
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


async def get_db() -> AsyncSession:
    """
    Dependency to get database session.
    Usage in FastAPI endpoints:
        async def endpoint(db: AsyncSession = Depends(get_db)):
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
