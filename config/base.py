from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

ROOT = Path(__file__).resolve().parents[1]


def env_file(profile: str) -> str | None:
    """``env/.env.<profile>`` when it exists, else None."""
    candidate = ROOT / "env" / f".env.{profile}"
    return str(candidate) if candidate.exists() else None


class FleetSettings(BaseSettings):
    """Fields every profile shares. Profiles override defaults only."""

    APP_ENV: str = "local"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # JSON list or comma separated; empty falls back to localhost origins
    CORS_ORIGINS: str = ""

    # Report defaults, used when a request leaves them out
    SERVICE_INTERVAL_DAYS: int = 30
    CLEANLINESS_HISTORY_MONTHS: int = 6
    CLEANLINESS_HISTORY_LIMIT: int = 200

    model_config = SettingsConfigDict(env_file_encoding="utf-8", extra="ignore")
