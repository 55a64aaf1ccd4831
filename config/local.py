from __future__ import annotations

from pydantic_settings import SettingsConfigDict

from .base import FleetSettings, env_file


class LocalSettings(FleetSettings):
    # File-backed SQLite so a checkout runs without a database server
    DATABASE_URL: str = "sqlite+aiosqlite:///./fleet_assets.db"
    APP_ENV: str = "local"
    DEBUG: bool = True
    LOG_LEVEL: str = "DEBUG"

    model_config = SettingsConfigDict(env_file=env_file("local"))
