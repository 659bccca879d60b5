"""Server helpers package."""

from floatkit.server.date import Date
from floatkit.server.system import System, format_size

__all__ = ["Date", "System", "format_size"]
