"""
Database Models

Small value types shared by the query executor and the driver layer.

DESIGN DECISION: A bound value's type is decided ONCE, at the bind boundary.
The driver never inspects Python types on its own; it receives an explicit
ParamType next to every value and coerces to that.
"""

from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


ParamValue = Union[int, bool, None, str]


class ParamType(str, Enum):
    """Explicit type tag sent to the driver with every bound value."""
    INT = "int"
    BOOL = "bool"
    NULL = "null"
    STR = "str"

    @classmethod
    def infer(cls, value: Any) -> "ParamType":
        """
        Infer the bind type of a loosely-typed value.

        Precedence is int, then bool, then null, else string.
        Python booleans are ints, so they are excluded from INT explicitly.
        """
        if isinstance(value, int) and not isinstance(value, bool):
            return cls.INT
        if isinstance(value, bool):
            return cls.BOOL
        if value is None:
            return cls.NULL
        return cls.STR


class FetchMode(str, Enum):
    """Shape of returned rows."""
    ASSOC = "assoc"  # column name -> value
    NUM = "num"      # positional tuple


class ConnectionState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTED = "connected"


class FailurePolicy(str, Enum):
    """
    What the executor does after logging a database failure.

    RAISE hands a typed error to the caller.
    EXIT terminates the process (legacy behaviour).
    """
    RAISE = "raise"
    EXIT = "exit"


class BoundParameter(BaseModel):
    """A named placeholder waiting to be bound to the next statement."""

    model_config = ConfigDict(frozen=True)

    placeholder: str = Field(
        ...,
        pattern=r"^:",
        description="Placeholder name including the leading colon"
    )
    value: Any = Field(
        default=None,
        description="Raw value as given by the caller"
    )

    @property
    def name(self) -> str:
        """Placeholder without the leading colon."""
        return self.placeholder[1:]

    @property
    def param_type(self) -> ParamType:
        return ParamType.infer(self.value)


# Leading keywords that decide what query() returns
ROW_STATEMENTS = frozenset({"select", "show"})
COUNT_STATEMENTS = frozenset({"insert", "update", "delete"})


def statement_keyword(sql: str) -> Optional[str]:
    """Return the lower-cased first token of a SQL string, if any."""
    parts = sql.split()
    if not parts:
        return None
    return parts[0].lower()
