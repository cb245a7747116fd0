"""
TaskFlow Configuration Management

Uses Pydantic Settings for type-safe configuration from environment variables.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    # =========================================================================
    # APPLICATION
    # =========================================================================
    APP_NAME: str = "TaskFlow"
    APP_ENV: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "info"
    VERSION: str = "0.1.0"

    # =========================================================================
    # API SERVER
    # =========================================================================
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000
    CORS_ORIGINS: str = "http://localhost:3000"

    # =========================================================================
    # PRIORITY SCORING
    # =========================================================================
    HOURS_PER_DAY: int = 6
    URGENCY_HORIZON_DAYS: int = 30
    NO_DEADLINE_URGENCY: int = 20

    # =========================================================================
    # SCHEDULING
    # =========================================================================
    CRITICAL_FLOAT_TOLERANCE: float = 0.01
    OVERLOAD_MARGIN: int = 25
    BOTTLENECK_MIN_DEPENDENTS: int = 2

    # =========================================================================
    # MILESTONES & ALERTS
    # =========================================================================
    MILESTONE_BUFFER_DAYS: int = 3
    DEADLINE_REMINDER_DAYS: int = 3

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Singleton instance for easy import
settings = get_settings()
