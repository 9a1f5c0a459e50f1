"""Configuration management for electron-rebuild."""

from electron_rebuild.core.config.loader import ConfigLoader
from electron_rebuild.core.config.settings import (
    DEFAULT_DIST_URL,
    DEFAULT_HEADERS_DIR,
    LoggingSettings,
    ProcessSettings,
    RebuildSettings,
    Settings,
    get_settings,
)

__all__ = [
    "ConfigLoader",
    "DEFAULT_DIST_URL",
    "DEFAULT_HEADERS_DIR",
    "LoggingSettings",
    "ProcessSettings",
    "RebuildSettings",
    "Settings",
    "get_settings",
]
