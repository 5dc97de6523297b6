"""
Configuration management for the Daily Sentences trainer
"""

from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_REVIEW_INTERVALS = [0, 1, 2, 4, 7, 15, 31, 60, 120, 365]


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    # Database Configuration
    database_url: str = Field(default="sqlite:///data/sentences.db")

    # Application Configuration
    log_level: str = Field(default="INFO")

    # Spaced Repetition Configuration
    daily_target: int = Field(default=3, ge=1)
    review_intervals: list[int] = Field(
        default_factory=lambda: list(DEFAULT_REVIEW_INTERVALS)
    )

    # Calendar day boundaries, "added today" and midnight anchoring
    timezone: str = Field(default="UTC")

    @field_validator("review_intervals")
    @classmethod
    def _check_intervals(cls, value: list[int]) -> list[int]:
        if not value:
            raise ValueError("review_intervals must not be empty")
        if any(days < 0 for days in value):
            raise ValueError("review_intervals must be non-negative")
        return value

    @field_validator("timezone")
    @classmethod
    def _check_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {value}") from e
        return value

    @property
    def tzinfo(self) -> ZoneInfo:
        """Timezone used for calendar-day calculations"""
        return ZoneInfo(self.timezone)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_nested_delimiter="__",
        extra="ignore"
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


def get_database_path() -> str:
    """Get the database file path from URL"""
    settings = get_settings()
    if settings.database_url.startswith("sqlite:///"):
        return settings.database_url.replace("sqlite:///", "")
    return "data/sentences.db"
