from __future__ import annotations

from pydantic_settings import SettingsConfigDict

from .base import FleetSettings, env_file


class ProdSettings(FleetSettings):
    # No default: production must name its database explicitly
    DATABASE_URL: str
    APP_ENV: str = "production"

    model_config = SettingsConfigDict(env_file=env_file("production"))
