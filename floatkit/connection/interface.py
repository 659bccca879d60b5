"""
Abstract Driver Interface

DESIGN DECISION: The query executor talks to the database through two
small abstract classes shaped like a prepared-statement API:
connection.prepare(sql) -> statement, statement.bind_value(...), execute().
This allows us to:
1. Run the same executor over SQLite and MySQL
2. Use fake drivers in tests that record every typed bind
3. Keep DB-API paramstyle differences out of the executor

The interface is intentionally simple - we're not building an ORM.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

from floatkit.models.database import FetchMode, ParamType


class DriverStatement(ABC):
    """A prepared statement with at most one open result set."""

    @abstractmethod
    def bind_value(self, placeholder: str, value: Any, param_type: ParamType) -> None:
        """
        Bind a value to a named placeholder.

        Args:
            placeholder: Name including the leading colon (":id")
            value: Raw value
            param_type: Type the driver must send the value as
        """
        pass

    @abstractmethod
    def execute(self) -> None:
        """
        Execute with the values bound so far.

        Raises:
            DriverError: If the database rejects the statement
        """
        pass

    @abstractmethod
    def fetch_all(self, mode: FetchMode = FetchMode.ASSOC) -> list:
        """Return every remaining row."""
        pass

    @abstractmethod
    def fetch(self, mode: FetchMode = FetchMode.ASSOC) -> Optional[Any]:
        """Return the next row, or None when exhausted."""
        pass

    @abstractmethod
    def fetch_column(self) -> Optional[Any]:
        """Return the first column of the next row, or None when exhausted."""
        pass

    @abstractmethod
    def row_count(self) -> int:
        """Rows affected by the last INSERT/UPDATE/DELETE."""
        pass

    @abstractmethod
    def close_cursor(self) -> None:
        """Release the result set so the connection can run another statement."""
        pass


class DriverConnection(ABC):
    """An open database connection."""

    @abstractmethod
    def prepare(self, sql: str) -> DriverStatement:
        """
        Prepare a statement.

        Raises:
            DriverError: If the statement cannot be prepared
        """
        pass

    @abstractmethod
    def last_insert_id(self) -> Any:
        """Identifier generated by the most recent insert."""
        pass

    @abstractmethod
    def begin_transaction(self) -> bool:
        pass

    @abstractmethod
    def commit(self) -> bool:
        pass

    @abstractmethod
    def rollback(self) -> bool:
        pass

    @abstractmethod
    def close(self) -> None:
        pass


class DatabaseError(Exception):
    """Base exception for database operations."""
    pass


class ConnectionFailure(DatabaseError):
    """Could not connect to the database."""
    pass


class StatementFailure(DatabaseError):
    """A statement could not be prepared, bound or executed."""

    def __init__(self, message: str, sql: Optional[str] = None):
        self.sql = sql
        super().__init__(message)


class DriverError(DatabaseError):
    """
    Native driver exception, wrapped.

    Drivers raise this; the executor turns it into ConnectionFailure or
    StatementFailure after logging.
    """
    pass
