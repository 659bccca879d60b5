"""
File Loggers

DESIGN DECISION: Every failure that matters is written to an append-only
text file AND emitted as a structured log event.
This provides:
1. A plain file an operator can tail on the server
2. Structured events for whatever collects stdlib logging

The database executor only depends on LoggerInterface.write(), so any
object with that method (or a test double) can be injected.
"""

import logging
import os
import pprint
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Optional

import structlog

from floatkit.config.settings import LoggingSettings
from floatkit.server.date import Date


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class LoggerInterface(ABC):
    """Append-only message sink."""

    @abstractmethod
    def write(self, message: str) -> None:
        """Append one message."""
        pass


class FileLogger(LoggerInterface):
    """
    Daily log files with a status tag per line.

    Lines look like:
        [19-10-2026 14:03:11] : [error] - message
    and go to <path>/<filename>-[19-10-2026].<extension>
    """

    def __init__(
        self,
        path: str = "logs",
        filename: str = "debug",
        extension: str = "log",
    ):
        self.set_path(path)
        self.filename = filename
        self.extension = extension
        self._logger = structlog.get_logger("floatkit.logs")

    def set_path(self, path: str) -> None:
        self.path = path
        os.makedirs(self.path, exist_ok=True)

    def log_file(self, now: Optional[datetime] = None) -> str:
        """Path of the file receiving today's entries."""
        now = now or Date.now()
        day = now.strftime("[%d-%m-%Y]")
        return os.path.join(self.path, f"{self.filename}-{day}.{self.extension}")

    def debug(self, message: Any = "", pretty: bool = False) -> None:
        if pretty or not isinstance(message, str):
            message = pprint.pformat(message)
        self._append("debug", message)
        self._logger.debug("log_written", status="debug", message=message)

    def info(self, message: str = "") -> None:
        self._append("info", message)
        self._logger.info("log_written", status="info", message=message)

    def warning(self, message: str = "") -> None:
        self._append("warning", message)
        self._logger.warning("log_written", status="warning", message=message)

    def error(self, message: str = "") -> None:
        self._append("error", message)
        self._logger.error("log_written", status="error", message=message)

    def custom(self, message: str = "", status: str = "custom") -> None:
        self._append(status, message)
        self._logger.info("log_written", status=status, message=message)

    def write(self, message: str) -> None:
        self.error(message)

    def _append(self, status: str, message: str) -> None:
        now = Date.now()
        line = f"{now.strftime('[%d-%m-%Y %H:%M:%S]')} : [{status}] - {message}\n"
        with open(self.log_file(now), "a", encoding="utf-8") as fh:
            fh.write(line)


class DatabaseLogger(FileLogger):
    """
    Failure log for the query executor.

    One file per day (<path>/19-10-2026.log), entries are:
        Time : 14:03:11
        <message>
    """

    def __init__(self, path: str = "logs/database"):
        super().__init__(path=path, filename="", extension="log")

    def log_file(self, now: Optional[datetime] = None) -> str:
        now = now or Date.now()
        return os.path.join(self.path, f"{now.strftime('%d-%m-%Y')}.{self.extension}")

    def write(self, message: str) -> None:
        now = Date.now()
        entry = f"Time : {now.strftime('%H:%M:%S')}\n{message}\n"
        with open(self.log_file(now), "a", encoding="utf-8") as fh:
            fh.write(entry)
        self._logger.error("database_error", message=message)


def create_logger(settings: Optional[LoggingSettings] = None) -> DatabaseLogger:
    """Build the database failure logger from settings."""
    settings = settings or LoggingSettings()
    logging.getLogger("floatkit").setLevel(settings.level.upper())
    return DatabaseLogger(path=settings.database_path)
