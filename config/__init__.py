"""
Runtime settings for the fleet service.

MODE (falling back to APP_ENV, then "local") picks a profile. Each profile
is a FleetSettings subclass that also reads ``env/.env.<profile>`` when the
file exists; real environment variables win over the file.
"""
from __future__ import annotations

import os

from .base import FleetSettings
from .local import LocalSettings
from .stage import StageSettings
from .prod import ProdSettings
from .test import TestSettings

PROFILES: dict[str, type[FleetSettings]] = {
    "local": LocalSettings,
    "stage": StageSettings,
    "staging": StageSettings,
    "prod": ProdSettings,
    "production": ProdSettings,
    "test": TestSettings,
}

MODE = (os.environ.get("MODE") or os.environ.get("APP_ENV") or "local").lower()


def load_settings(mode: str = MODE) -> FleetSettings:
    """Instantiate the profile for ``mode``; unknown modes get local."""
    return PROFILES.get(mode, LocalSettings)()


settings = load_settings()

__all__ = ["settings", "load_settings", "FleetSettings", "MODE"]
