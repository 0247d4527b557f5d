import importlib
import os
from types import ModuleType
from typing import Optional

_ENVIRONMENTS = {
    "prod": "config.production",
    "production": "config.production",
    "test": "config.testing",
    "testing": "config.testing",
}


def get_settings_module() -> str:
    """Settings module for APP_ENV; anything unrecognised runs as development."""

    env = os.getenv("APP_ENV", "development").strip().lower()
    return _ENVIRONMENTS.get(env, "config.development")


def load_settings(module_name: Optional[str] = None) -> ModuleType:
    return importlib.import_module(module_name or get_settings_module())
