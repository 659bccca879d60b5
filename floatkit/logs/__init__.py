"""Logging package."""

from floatkit.logs.exception import ErrorHandler
from floatkit.logs.logger import (
    DatabaseLogger,
    FileLogger,
    LoggerInterface,
    create_logger,
)

__all__ = [
    "DatabaseLogger",
    "ErrorHandler",
    "FileLogger",
    "LoggerInterface",
    "create_logger",
]
