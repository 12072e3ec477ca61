"""Configuration management for signal2noise."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="S2N_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Durable storage
    data_dir: Path = Field(
        default=Path.home() / ".signal2noise", description="Directory holding the file-backed state blob"
    )
    storage_key: str = Field(default="s2n-app-state", description="Fixed key the state blob is stored under")

    # Pydantic Logfire Configuration (optional)
    logfire_token: str | None = Field(default=None, description="Pydantic Logfire token for observability")
    environment: str = Field(default="development", description="Deployment environment reported to logfire")
    log_level: str = Field(default="INFO", description="Root log level for standard logging")


# Application Constants
class Constants:
    """Application-wide constants."""

    # Categorization wizard
    SIGNAL_CHECKLIST_THRESHOLD: int = 3  # >= 3 of 4 answers marks a task as signal
    CHECKLIST_QUESTION_COUNT: int = 4

    # Task defaults
    DEFAULT_TASK_PRIORITY: str = "medium"
    DEFAULT_TASK_DURATION_MINUTES: int = 30

    # North Star goal
    DEFAULT_NORTH_STAR_HEADER: str = "Goal of the Week"
    NORTH_STAR_MIN_LENGTH: int = 10
    NORTH_STAR_MAX_LENGTH: int = 500
    NORTH_STAR_MIN_WORDS: int = 5

    # Insight thresholds
    INSIGHT_LOW_FOCUS_RATIO: int = 30  # signal-to-noise percentage
    INSIGHT_LOW_COMPLETION_RATE: int = 70  # percentage
    INSIGHT_STREAK_MILESTONE: int = 7  # days
    INSIGHT_OVERCOMMIT_AVERAGE: int = 7  # signal tasks per day

    # Recurrence intervals (days)
    RECURRENCE_DAILY_DAYS: int = 1
    RECURRENCE_WEEKLY_DAYS: int = 7
    RECURRENCE_MONTHLY_DAYS: int = 30

    # Serialization
    STATE_ENCODING: str = "utf-8"


def get_settings() -> Settings:
    """Get application settings (singleton pattern)."""
    return Settings()


# Global settings instance
settings = get_settings()
constants = Constants()
