from __future__ import annotations

from pydantic_settings import SettingsConfigDict

from .base import FleetSettings, env_file
from .database import get_database_url


class StageSettings(FleetSettings):
    """Staging assembles its URL from DB_* variables set by the deploy."""

    APP_ENV: str = "stage"

    DB_DRIVER: str = "postgresql+asyncpg"
    DB_HOST: str | None = None
    DB_PORT: int = 5432
    DB_USER: str | None = None
    DB_PASSWORD: str | None = None
    DB_NAME: str | None = None

    model_config = SettingsConfigDict(env_file=env_file("staging"))

    @property
    def DATABASE_URL(self) -> str:
        return get_database_url(
            driver=self.DB_DRIVER,
            host=self.DB_HOST,
            port=self.DB_PORT,
            user=self.DB_USER,
            password=self.DB_PASSWORD,
            name=self.DB_NAME,
        )
