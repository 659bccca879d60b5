"""Configuration package."""

from floatkit.config.settings import (
    AppSettings,
    ConnectionConfig,
    LoggingSettings,
    Settings,
    get_settings,
    load_connection_config,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "ConnectionConfig",
    "LoggingSettings",
    "Settings",
    "get_settings",
    "load_connection_config",
    "validate_all_settings",
]
