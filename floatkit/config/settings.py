"""
Configuration Management for floatkit

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Connection settings are read once and frozen; the query executor
reconnects with exactly the settings it was given.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from floatkit.models.database import FailurePolicy
from floatkit.storage.json_file import JsonFile


# Keys used by older configuration files
LEGACY_CONNECTION_KEYS = {
    "db": "database",
    "pswd": "password",
}


class ConnectionConfig(BaseSettings):
    """Database connection settings."""

    model_config = SettingsConfigDict(
        env_prefix="DB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    driver: Literal["mysql", "sqlite"] = Field(
        default="mysql",
        description="Database driver"
    )
    host: str = Field(
        default="localhost",
        description="Database server host"
    )
    port: int = Field(
        default=3306,
        ge=1,
        le=65535,
        description="Database server port"
    )
    database: str = Field(
        default="",
        description="Database name (or file path for sqlite)"
    )
    user: str = Field(
        default="root",
        description="Database user"
    )
    password: str = Field(
        default="",
        description="Database password"
    )
    charset: str = Field(
        default="utf8",
        description="Connection character set"
    )

    @field_validator("charset")
    @classmethod
    def validate_charset(cls, v: str) -> str:
        """Charset ends up in a SET NAMES statement, keep it to a bare identifier."""
        if not v.replace("_", "").isalnum():
            raise ValueError(f"Invalid charset: {v!r}")
        return v


class LoggingSettings(BaseSettings):
    """Log file locations and level."""

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    path: str = Field(
        default="logs",
        description="Directory for general log files"
    )
    filename: str = Field(
        default="debug",
        description="Base name of general log files"
    )
    extension: str = Field(
        default="log",
        description="Log file extension"
    )
    database_path: str = Field(
        default="logs/database",
        description="Directory for database failure logs"
    )
    level: Literal["debug", "info", "warning", "error", "critical"] = Field(
        default="info",
        description="Minimum level for structured logs"
    )


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    timezone: str = Field(
        default="UTC",
        description="Default timezone for the date helper"
    )
    failure_policy: FailurePolicy = Field(
        default=FailurePolicy.RAISE,
        description="What to do after a database failure is logged"
    )

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {v!r}") from e
        return v


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Note: These are loaded lazily to allow partial configuration

    @property
    def database(self) -> ConnectionConfig:
        return ConnectionConfig()

    @property
    def logging(self) -> LoggingSettings:
        return LoggingSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def load_connection_config(path: Union[str, Path]) -> ConnectionConfig:
    """
    Read connection settings from a JSON file.

    `path` may be given with or without the .json extension.
    Legacy keys (db, pswd) are accepted.
    """
    path = str(path)
    if path.endswith(JsonFile.EXT):
        path = path[: -len(JsonFile.EXT)]

    with JsonFile(path) as config_file:
        data = config_file.parse() or {}

    if not isinstance(data, dict):
        raise ValueError(f"Connection config must be a JSON object: {config_file.path}")

    values = {}
    for key, value in data.items():
        values[LEGACY_CONNECTION_KEYS.get(key, key)] = value
    return ConnectionConfig(**values)


def validate_all_settings() -> dict[str, Union[bool, str]]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}.
    Useful for startup checks.
    """
    results: dict[str, Union[bool, str]] = {}

    settings = get_settings()

    for name in ("database", "logging", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
