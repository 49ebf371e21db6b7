"""Configuration settings for Jobboard."""

from pathlib import Path
from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.utils.logging import LEVELS


class Settings(BaseSettings):
    """Board settings read from the environment or a .env file.

    Variable names are the upper-cased field names (``TRACKER_DB_PATH``,
    ``ADMIN_SECRET``, ...). Every field has a working default except
    ``admin_secret``, without which admin jobs are refused.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Paths
    tracker_db_path: Path = Field(
        default=Path("./data/board.db"),
        description="Path to the SQLite board database",
    )
    board_template_path: Path | None = Field(
        default=None,
        description="Optional YAML file overriding the default status columns",
    )

    # Admin
    admin_secret: str | None = Field(
        default=None,
        description="Shared secret required for maintenance jobs (backfill, migration)",
    )

    # Query defaults
    activity_limit: Annotated[int, Field(gt=0)] = Field(
        default=10,
        description="Default number of events returned by the activity feed",
    )
    leaderboard_limit: Annotated[int, Field(gt=0)] = Field(
        default=10,
        description="Default number of entries returned by the leaderboards",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level: DEBUG, INFO, WARNING, ERROR",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Accept level names in any case; store them upper-cased."""
        level = str(v).upper()
        if level not in LEVELS:
            raise ValueError(f"Invalid log level: {v}. Must be one of {sorted(LEVELS)}")
        return level

    @field_validator("admin_secret", mode="before")
    @classmethod
    def blank_secret_is_unset(cls, v: str | None) -> str | None:
        """Treat an empty ADMIN_SECRET the same as a missing one."""
        if v is None:
            return None
        value = str(v).strip()
        return value or None


# Process-wide settings, loaded on first use
_settings: Settings | None = None


def get_settings() -> Settings:
    """Return the process-wide settings, loading them on first call."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Forget the loaded settings so the next call re-reads the environment."""
    global _settings
    _settings = None
