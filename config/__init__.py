import os
from typing import Optional

_SETTINGS_BY_ENV = {
    "prod": "config.production",
    "production": "config.production",
    "test": "config.testing",
    "testing": "config.testing",
}


def get_settings_module(env: Optional[str] = None) -> str:
    """Dotted path of the settings module for `env` (default: APP_ENV, then development)."""
    name = (env or os.getenv("APP_ENV") or "development").strip().lower()
    return _SETTINGS_BY_ENV.get(name, "config.development")
