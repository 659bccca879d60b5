"""
Database Connection Package

Query executor, driver interface and the bundled DB-API drivers.
"""

from floatkit.connection.db import QueryExecutor, create_query_executor
from floatkit.connection.drivers import (
    DbApiConnection,
    DbApiStatement,
    MysqlDriver,
    SqliteDriver,
    connect,
    rewrite_placeholders,
)
from floatkit.connection.interface import (
    ConnectionFailure,
    DatabaseError,
    DriverConnection,
    DriverError,
    DriverStatement,
    StatementFailure,
)

__all__ = [
    # Executor
    "QueryExecutor",
    "create_query_executor",
    # Interfaces
    "DriverConnection",
    "DriverStatement",
    # Exceptions
    "ConnectionFailure",
    "DatabaseError",
    "DriverError",
    "StatementFailure",
    # DB-API drivers
    "DbApiConnection",
    "DbApiStatement",
    "MysqlDriver",
    "SqliteDriver",
    "connect",
    "rewrite_placeholders",
]
