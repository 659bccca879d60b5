"""
floatkit - Framework Utility Classes

Small building blocks for a web application:
a query executor over one database connection, file and JSON
wrappers, date and system helpers, and file loggers.

DESIGN PRINCIPLES:
1. Thin facades over the standard calls
2. Values are always bound, never interpolated into SQL
3. Every failure is logged exactly once
4. The caller decides whether a failure is fatal
"""

__version__ = "1.0.0"
__author__ = "floatkit Team"
