"""Environment-driven settings for speedracer.

``RaceSettings`` holds the defaults a host program may want to tune without
code changes: the deadline used by ``RaceTrack()`` when none is given, and the
logging level/format applied by :func:`configure_from_settings`.

Features:
    - **env_prefix:** ``SPEEDRACER_`` namespacing (``SPEEDRACER_LOG_LEVEL``)
    - **.env file support:** Automatic loading via pydantic-settings
    - **Extra ignore:** Unknown env vars don't cause startup failures

Examples:
    >>> from speedracer.core.settings import get_settings
    >>> get_settings().default_deadline_seconds
    5.0
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from speedracer.core.logging import configure_logging


class RaceSettings(BaseSettings):
    """Settings shared by every RaceTrack in the process.

    Fields
    ──────
    default_deadline_seconds : Deadline used when ``RaceTrack()`` gets none
    log_level                : Structlog log level
    json_logs                : JSON output (None = auto-detect from TTY)
    """

    model_config = SettingsConfigDict(
        env_prefix="SPEEDRACER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Racing ───────────────────────────────────────────────────
    default_deadline_seconds: float = Field(
        default=5.0,
        description="Deadline applied when a RaceTrack is built without one",
    )

    # ── Observability ────────────────────────────────────────────
    log_level: str = "INFO"
    json_logs: bool | None = None

    @field_validator("log_level")
    @classmethod
    def _normalise_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level: {value}")
        return level


@lru_cache(maxsize=1)
def get_settings() -> RaceSettings:
    """Cached settings — loaded once per process."""
    return RaceSettings()


def configure_from_settings(settings: RaceSettings | None = None) -> RaceSettings:
    """Apply the logging section of ``settings`` and return them."""
    settings = settings or get_settings()
    configure_logging(level=settings.log_level, json_format=settings.json_logs)
    return settings


__all__ = ["RaceSettings", "get_settings", "configure_from_settings"]
