"""
Application Configuration

This module provides type-safe configuration loading using Pydantic settings.
Environment variables are loaded from .env file and validated.

Usage:
    from study_tracker.config import settings

    # Access settings
    db_url = settings.POSTGRES_URL
    tz = settings.study_tz
"""

from functools import lru_cache
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings

from study_tracker.enums.api import RateLimitType


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "Study Progress Tracker"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: list[str] = ["http://localhost:3000"]

    # PostgreSQL
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "studytracker"
    POSTGRES_PASSWORD: str = ""
    POSTGRES_DB: str = "studytracker"

    @property
    def POSTGRES_URL(self) -> str:
        """Async PostgreSQL connection URL."""
        return f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

    # Auth tokens
    # Required; the app refuses to start without a signing key
    JWT_SECRET_KEY: str = Field(min_length=16)
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # Day buckets are computed in this IANA timezone
    STUDY_TIMEZONE: str = "UTC"

    # Nightly streak job (local time in STUDY_TIMEZONE)
    STREAK_JOB_HOUR: int = 0
    STREAK_JOB_MINUTE: int = 0

    # Used for the weekly focus chart when a user has no daily goal
    WEEKLY_FOCUS_DEFAULT_GOAL_HOURS: float = 5.0

    # Rate limiting
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_DEFAULT: str = "100/minute"
    RATE_LIMIT_AUTH: str = "10/minute"

    @property
    def study_tz(self) -> ZoneInfo:
        """Timezone used for day-bucket normalization."""
        return ZoneInfo(self.STUDY_TIMEZONE)

    def get_rate_limit(self, rate_limit_type: RateLimitType) -> str:
        """Return the limit string (e.g. "10/minute") for an endpoint class."""
        if rate_limit_type == RateLimitType.AUTH:
            return self.RATE_LIMIT_AUTH
        return self.RATE_LIMIT_DEFAULT

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()


@lru_cache()
def load_yaml_config() -> dict[str, Any]:
    """Load application configuration from config/default.yaml."""
    config_path = Path(__file__).parent.parent.parent.parent / "config" / "default.yaml"

    if not config_path.exists():
        return {}

    with open(config_path) as f:
        return yaml.safe_load(f) or {}


yaml_config: dict[str, Any] = load_yaml_config()
