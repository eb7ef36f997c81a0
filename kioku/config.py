"""
Configuration settings for Kioku.

Uses Pydantic Settings for environment variable management with .env file support.
Every variable is read with the KIOKU_ prefix (e.g. KIOKU_DATABASE_URL).
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import TYPE_CHECKING, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

if TYPE_CHECKING:
    from kioku.core.scheduler import SM2Config
    from kioku.study.policy import ReviewPolicy

KIOKU_HOME = Path.home() / ".kioku"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="KIOKU_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Storage
    # ========================================
    database_url: str = Field(
        default=f"sqlite:///{KIOKU_HOME / 'kioku.db'}",
        description="SQLAlchemy connection string for the card store",
    )
    session_dir: Path = Field(
        default=KIOKU_HOME / "sessions",
        description="Directory for saved in-progress study sessions",
    )
    learner_id: str = Field(
        default="default",
        description="Learner whose collection the CLI operates on",
    )

    # ========================================
    # Time
    # ========================================
    timezone: str = Field(
        default="UTC",
        description="IANA time zone used for calendar-day scheduling",
    )

    # ========================================
    # Presentation
    # ========================================
    front_side: Literal["front", "back"] = Field(
        default="front",
        description="Which face of a card is shown first",
    )
    show_reading_immediately: bool = Field(
        default=False,
        description="Show the pronunciation aid together with the front face",
    )

    # ========================================
    # SM-2 Scheduling
    # ========================================
    minimum_easiness: float = Field(default=1.3, description="Floor for the easiness factor")
    first_interval: int = Field(default=1, description="Days after the first passed review")
    second_interval: int = Field(default=6, description="Days after the second passed review")
    max_interval_days: int = Field(default=365, description="Ceiling for any interval")
    passing_grade: int = Field(
        default=3,
        ge=0,
        le=5,
        description="Lowest grade the scheduler counts as a passed recall",
    )

    # ========================================
    # Study Sessions
    # ========================================
    requeue_below: int = Field(
        default=4,
        ge=0,
        le=6,
        description="Grades below this are retried later in the same session",
    )
    shuffle_sessions: bool = Field(
        default=True,
        description="Randomize the order of a new session queue",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING",
        description="Logging verbosity level",
    )
    log_file: str | None = Field(
        default=None,
        description="Log file path (None for stderr only)",
    )

    @field_validator("minimum_easiness")
    @classmethod
    def _minimum_easiness_positive(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("minimum_easiness must be positive")
        return value

    def sm2_config(self) -> SM2Config:
        """Build the scheduler configuration from these settings."""
        from kioku.core.scheduler import SM2Config

        return SM2Config(
            minimum_easiness=self.minimum_easiness,
            first_interval=self.first_interval,
            second_interval=self.second_interval,
            max_interval_days=self.max_interval_days,
            passing_grade=self.passing_grade,
        )

    def review_policy(self) -> ReviewPolicy:
        """Build the in-session retry policy from these settings."""
        from kioku.study.policy import ReviewPolicy

        return ReviewPolicy(requeue_below=self.requeue_below)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
