"""
Error Handler

Small helpers around process-level error reporting: exit hooks,
user warnings and logging a message to the general log file.
"""

import atexit
import warnings
from typing import Callable, Optional

from floatkit.logs.logger import FileLogger


class ErrorHandler:
    """
    Process error helper.

    Warnings raised through trigger() are remembered so the last one
    can be inspected or cleared afterwards.
    """

    def __init__(self, logger: Optional[FileLogger] = None):
        self._logger = logger
        self._last_error: Optional[dict] = None

    def shutdown(self, callback: Callable[[], None]) -> None:
        """Run `callback` when the interpreter exits."""
        atexit.register(callback)

    def trigger(self, message: str, category: type = UserWarning) -> bool:
        """Issue a warning and remember it as the last error."""
        self._last_error = {"type": category.__name__, "message": message}
        warnings.warn(message, category, stacklevel=2)
        return True

    def get_last_error(self) -> Optional[dict]:
        return self._last_error

    def clear_last_error(self) -> None:
        self._last_error = None

    def log(self, message: str = "") -> str:
        """Write `message` to the general log file and return it."""
        if self._logger is None:
            self._logger = FileLogger()
        self._logger.error(message)
        return message
