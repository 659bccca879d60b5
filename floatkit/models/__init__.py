"""
Data Models Package

Pydantic models and enums shared across floatkit.
"""

from floatkit.models.database import (
    COUNT_STATEMENTS,
    ROW_STATEMENTS,
    BoundParameter,
    ConnectionState,
    FailurePolicy,
    FetchMode,
    ParamType,
    ParamValue,
    statement_keyword,
)

__all__ = [
    "COUNT_STATEMENTS",
    "ROW_STATEMENTS",
    "BoundParameter",
    "ConnectionState",
    "FailurePolicy",
    "FetchMode",
    "ParamType",
    "ParamValue",
    "statement_keyword",
]
