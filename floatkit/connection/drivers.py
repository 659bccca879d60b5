"""
DB-API Drivers

Concrete DriverConnection implementations over DB-API 2.0 modules:
- SqliteDriver (stdlib sqlite3), used for local files and tests
- MysqlDriver (mysql-connector-python), the production target

SQL is always written with named ":name" placeholders. Each driver
rewrites them into its own paramstyle before execution.

Every native driver exception is wrapped into DriverError; nothing
else leaves this module.
"""

import sqlite3
from typing import Any, Callable, Optional

import mysql.connector

from floatkit.config.settings import ConnectionConfig
from floatkit.connection.interface import DriverConnection, DriverError, DriverStatement
from floatkit.models.database import FetchMode, ParamType


QUOTES = ("'", '"', "`")


def rewrite_placeholders(sql: str, template: str) -> str:
    """
    Rewrite :name placeholders using `template` (e.g. "%({name})s").

    Quoted literals, identifiers and "::" casts are left untouched.
    """
    out = []
    i = 0
    length = len(sql)
    quote: Optional[str] = None

    while i < length:
        char = sql[i]

        if quote:
            out.append(char)
            if char == quote:
                # doubled quote is an escaped quote inside the literal
                if i + 1 < length and sql[i + 1] == quote:
                    out.append(sql[i + 1])
                    i += 1
                else:
                    quote = None
            elif char == "\\" and i + 1 < length:
                out.append(sql[i + 1])
                i += 1
            i += 1
            continue

        if char in QUOTES:
            quote = char
            out.append(char)
            i += 1
            continue

        if char == ":":
            if i + 1 < length and sql[i + 1] == ":":
                out.append("::")
                i += 2
                continue
            j = i + 1
            if j < length and (sql[j].isalpha() or sql[j] == "_"):
                while j < length and (sql[j].isalnum() or sql[j] == "_"):
                    j += 1
                out.append(template.format(name=sql[i + 1:j]))
                i = j
                continue

        out.append(char)
        i += 1

    return "".join(out)


def coerce_value(value: Any, param_type: ParamType) -> Any:
    """Convert a raw value to the type it is declared as."""
    if param_type == ParamType.NULL:
        return None
    if param_type == ParamType.INT:
        return int(value)
    if param_type == ParamType.BOOL:
        return bool(value)
    if isinstance(value, (str, bytes)):
        return value
    return str(value)


class DbApiStatement(DriverStatement):
    """Statement backed by one DB-API cursor."""

    def __init__(self, connection: "DbApiConnection", sql: str):
        self._connection = connection
        self._sql = connection.rewrite(sql)
        self._params: dict[str, Any] = {}
        self._cursor: Optional[Any] = None

    @property
    def sql(self) -> str:
        return self._sql

    @property
    def params(self) -> dict[str, Any]:
        return dict(self._params)

    def bind_value(self, placeholder: str, value: Any, param_type: ParamType) -> None:
        # Repeated names collapse here, last bound wins
        self._params[placeholder.lstrip(":")] = coerce_value(value, param_type)

    def execute(self) -> None:
        self.close_cursor()
        cursor = self._connection.cursor()
        if self._params:
            self._connection.call(cursor.execute, self._sql, self._params)
        else:
            self._connection.call(cursor.execute, self._sql)
        self._cursor = cursor
        self._connection.track(cursor)

    def _columns(self) -> list[str]:
        return [column[0] for column in self._cursor.description]

    def _shape(self, row: Any, mode: FetchMode) -> Any:
        if mode == FetchMode.NUM:
            return tuple(row)
        return dict(zip(self._columns(), row))

    def fetch_all(self, mode: FetchMode = FetchMode.ASSOC) -> list:
        if self._cursor is None or self._cursor.description is None:
            return []
        rows = self._connection.call(self._cursor.fetchall)
        return [self._shape(row, mode) for row in rows]

    def fetch(self, mode: FetchMode = FetchMode.ASSOC) -> Optional[Any]:
        if self._cursor is None or self._cursor.description is None:
            return None
        row = self._connection.call(self._cursor.fetchone)
        if row is None:
            return None
        return self._shape(row, mode)

    def fetch_column(self) -> Optional[Any]:
        row = self.fetch(FetchMode.NUM)
        if row is None:
            return None
        return row[0]

    def row_count(self) -> int:
        if self._cursor is None:
            return 0
        return self._cursor.rowcount

    def close_cursor(self) -> None:
        if self._cursor is not None:
            cursor, self._cursor = self._cursor, None
            self._connection.call(cursor.close)


class DbApiConnection(DriverConnection):
    """
    Shared DB-API connection logic.

    Subclasses set `errors` to the module's base exception class and
    provide connect(), rewrite() and _begin(). cursor() may be
    overridden when the driver needs non-default cursors.
    """

    errors: tuple = ()

    def __init__(self, raw: Any):
        self.raw = raw
        self._last_insert_id: Any = None

    @classmethod
    def connect(cls, config: ConnectionConfig) -> "DbApiConnection":
        raise NotImplementedError

    def call(self, fn: Callable, *args: Any) -> Any:
        """Run a driver call, wrapping native errors into DriverError."""
        try:
            return fn(*args)
        except self.errors as e:
            raise DriverError(str(e)) from e

    def cursor(self) -> Any:
        return self.call(self.raw.cursor)

    def rewrite(self, sql: str) -> str:
        return sql

    def track(self, cursor: Any) -> None:
        lastrowid = getattr(cursor, "lastrowid", None)
        if lastrowid:
            self._last_insert_id = lastrowid

    def prepare(self, sql: str) -> DbApiStatement:
        return DbApiStatement(self, sql)

    def last_insert_id(self) -> Any:
        return self._last_insert_id

    def _begin(self) -> None:
        raise NotImplementedError

    def begin_transaction(self) -> bool:
        self.call(self._begin)
        return True

    def commit(self) -> bool:
        self.call(self.raw.commit)
        return True

    def rollback(self) -> bool:
        self.call(self.raw.rollback)
        return True

    def close(self) -> None:
        self.call(self.raw.close)


class SqliteDriver(DbApiConnection):
    """
    SQLite connection in autocommit mode.

    sqlite3 understands :name natively, so SQL passes through unchanged.
    Transactions are opened explicitly with BEGIN.
    """

    errors = (sqlite3.Error,)

    @classmethod
    def connect(cls, config: ConnectionConfig) -> "SqliteDriver":
        database = config.database or ":memory:"
        try:
            raw = sqlite3.connect(database, isolation_level=None)
        except sqlite3.Error as e:
            raise DriverError(f"Unable to open database file {database}: {e}") from e
        return cls(raw)

    def _begin(self) -> None:
        self.raw.execute("BEGIN")


class MysqlDriver(DbApiConnection):
    """
    MySQL connection through mysql-connector-python.

    Autocommit is on so single statements persist immediately,
    matching what callers expect outside begin_transaction().

    Cursors are buffered: row() and single() read one row and then
    close, which an unbuffered cursor refuses while rows are unread.
    """

    errors = (mysql.connector.Error,)

    @classmethod
    def connect(cls, config: ConnectionConfig) -> "MysqlDriver":
        try:
            raw = mysql.connector.connect(
                host=config.host,
                port=config.port,
                database=config.database or None,
                user=config.user,
                password=config.password,
                charset=config.charset,
                autocommit=True,
                consume_results=True,
            )
            cursor = raw.cursor()
            cursor.execute(f"SET NAMES {config.charset}")
            cursor.close()
        except mysql.connector.Error as e:
            raise DriverError(str(e)) from e
        return cls(raw)

    def cursor(self) -> Any:
        return self.call(lambda: self.raw.cursor(buffered=True))

    def rewrite(self, sql: str) -> str:
        return rewrite_placeholders(sql, "%({name})s")

    def _begin(self) -> None:
        self.raw.start_transaction()


DRIVERS: dict[str, type[DbApiConnection]] = {
    "sqlite": SqliteDriver,
    "mysql": MysqlDriver,
}


def connect(config: ConnectionConfig) -> DriverConnection:
    """Open a connection with the driver named in `config`."""
    driver = DRIVERS.get(config.driver)
    if driver is None:
        raise DriverError(f"Unsupported database driver: {config.driver}")
    return driver.connect(config)
