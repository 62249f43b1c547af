"""
Configuration settings for the Awareness Reporting API
"""
from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
    )

    # App
    PROJECT_NAME: str = "Awareness Reporting API"
    API_V1_STR: str = "/api/v1"
    ENVIRONMENT: str = Field(default="development")
    DEBUG: bool = Field(default=False)
    FRONTEND_URL: str = Field(default="http://localhost:3000")

    # Security & JWT Authentication
    SECRET_KEY: str = Field(default="change-me-in-production")
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24  # 1 day

    # Database
    DATABASE_URL: str = Field(
        default="sqlite+aiosqlite:///./awareness.db",
        description="Database connection URL - should be set via environment variable"
    )
    DB_ECHO: bool = Field(default=False)

    # Data protection defaults (seed the stored retention policy on first read)
    DEFAULT_RETENTION_DAYS: int = Field(default=90, gt=0)
    INVITATION_EXPIRATION_HOURS: int = Field(default=72, gt=0)

    # Retention purge scheduler
    PURGE_SCHEDULER_ENABLED: bool = Field(default=True)
    PURGE_INTERVAL_MINUTES: int = Field(default=60, gt=0)
    PURGE_BATCH_SIZE: int = Field(default=500, gt=0)

    # Bootstrap admin, created on startup when both are set
    SEED_ADMIN_EMAIL: Optional[str] = Field(default=None)
    SEED_ADMIN_PASSWORD: Optional[str] = Field(default=None)

    # CORS
    ALLOWED_ORIGINS: List[str] = Field(
        default=["http://localhost:3000"]
    )


settings = Settings()
