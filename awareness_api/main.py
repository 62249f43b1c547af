"""
Awareness Reporting API - Main Application
"""
import logging
from logging.handlers import RotatingFileHandler
import os
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from sqlalchemy import text

from awareness_api.core.config import settings
from awareness_api.api.v1.api import api_router
from awareness_api.db.session import engine, AsyncSessionLocal
from awareness_api.models import Base
from awareness_api.services.invitation_service import get_invitation_service
from awareness_api.services.retention_policy import get_retention_policy_store
from awareness_api.services.retention_scheduler import RetentionPurgeScheduler
from awareness_api.services.user_directory import get_user_directory


# Configure logging
def setup_logging():
    """Setup application logging with file and console handlers"""
    log_dir = "logs"
    if not os.path.exists(log_dir):
        os.makedirs(log_dir)

    log_format = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

    # Set log level based on environment
    log_level = logging.DEBUG if settings.ENVIRONMENT == "development" else logging.INFO

    logging.basicConfig(
        level=log_level,
        format=log_format,
        handlers=[
            # File handler with rotation (10MB per file, keep 10 backups)
            RotatingFileHandler(
                os.path.join(log_dir, 'app.log'),
                maxBytes=10485760,  # 10MB
                backupCount=10,
                encoding='utf-8'
            ),
            logging.StreamHandler()
        ]
    )

    # Set specific log levels for noisy libraries
    logging.getLogger('apscheduler').setLevel(logging.WARNING)
    logging.getLogger('aiosqlite').setLevel(logging.WARNING)
    logging.getLogger('passlib').setLevel(logging.ERROR)


# Initialize logging
setup_logging()
logger = logging.getLogger(__name__)


async def init_database():
    """
    Verify the store is reachable and seed governance state.
    Any failure here aborts startup.
    """
    async with engine.begin() as conn:
        await conn.execute(text("SELECT 1"))
        # Create tables if they don't exist (dev only)
        if settings.ENVIRONMENT == "development":
            logger.info("Development mode: Creating database tables if they don't exist")
            await conn.run_sync(Base.metadata.create_all)
        else:
            logger.info("Schema is managed by Alembic; run 'alembic upgrade head' before starting")

    async with AsyncSessionLocal() as db:
        await get_retention_policy_store().get(db)
        await db.commit()
        if settings.SEED_ADMIN_EMAIL and settings.SEED_ADMIN_PASSWORD:
            await get_user_directory().ensure_admin(db, settings.SEED_ADMIN_EMAIL, settings.SEED_ADMIN_PASSWORD)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan event handler for startup and shutdown."""
    logger.info("Starting Awareness Reporting API...")
    logger.info(f"Environment: {settings.ENVIRONMENT}")

    try:
        await init_database()
    except Exception:
        logger.critical("Database unreachable or not initialised; aborting startup", exc_info=True)
        raise

    purge_scheduler = None
    if settings.PURGE_SCHEDULER_ENABLED:
        purge_scheduler = RetentionPurgeScheduler(
            session_factory=AsyncSessionLocal,
            invitation_service=get_invitation_service(),
            policy_store=get_retention_policy_store(),
        )
        purge_scheduler.start()
    app.state.purge_scheduler = purge_scheduler

    logger.info("API startup complete")
    yield

    logger.info("Shutting down Awareness Reporting API...")
    if purge_scheduler is not None:
        purge_scheduler.shutdown()
    await engine.dispose()
    logger.info("Database connections closed")


app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Incident reporting for volunteer organizations with built-in data protection",
    version="1.0.0",
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    docs_url=f"{settings.API_V1_STR}/docs",
    redoc_url=f"{settings.API_V1_STR}/redoc",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# API router
app.include_router(api_router, prefix=settings.API_V1_STR)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": "awareness-reporting-api",
        "version": "1.0.0"
    }
