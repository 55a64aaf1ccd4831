from __future__ import annotations

from pydantic_settings import SettingsConfigDict

from .base import FleetSettings, env_file


class TestSettings(FleetSettings):
    # tests/conftest.py points this at TEST_DATABASE_URL
    DATABASE_URL: str = "sqlite+aiosqlite:///./fleet_assets_test.db"
    APP_ENV: str = "test"
    LOG_LEVEL: str = "WARNING"

    model_config = SettingsConfigDict(env_file=env_file("test"))
