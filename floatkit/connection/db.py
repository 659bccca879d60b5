"""
Query Executor

DESIGN DECISION: One executor owns one connection and one pending
parameter buffer. Every public query method goes through the same
prepare -> bind -> execute path, so binding rules and failure
handling live in exactly one place.

Failures are never returned as values. They are logged once through
the injected logger, then either raised as a typed error (RAISE) or
turned into process termination (EXIT), depending on the policy the
caller picked.
"""

from collections.abc import Mapping
from typing import Any, Callable, Optional, Union

import structlog

from floatkit.config.settings import ConnectionConfig, get_settings
from floatkit.connection.drivers import connect
from floatkit.connection.interface import (
    ConnectionFailure,
    DriverConnection,
    DriverError,
    DriverStatement,
    StatementFailure,
)
from floatkit.logs.logger import LoggerInterface, create_logger
from floatkit.models.database import (
    COUNT_STATEMENTS,
    ROW_STATEMENTS,
    BoundParameter,
    ConnectionState,
    FailurePolicy,
    FetchMode,
    statement_keyword,
)
from floatkit.server.date import Date


DriverFactory = Callable[[ConnectionConfig], DriverConnection]


class QueryExecutor:
    """
    Runs SQL against a single database connection.

    GUARANTEES:
    - Values are bound with an explicit type, never interpolated
    - The pending parameter buffer is empty after every query
    - A closed executor reconnects with its original config on next use
    - Each failure reaches the logger exactly once

    Not thread-safe: use one executor per thread.
    """

    def __init__(
        self,
        config: ConnectionConfig,
        logger: Optional[LoggerInterface] = None,
        driver: DriverFactory = connect,
        policy: Union[FailurePolicy, str] = FailurePolicy.RAISE,
    ):
        """
        Connect to the database.

        Args:
            config: Connection settings, kept for reconnects
            logger: Receives one message per failure.
                    If None, failures only go to the structured log.
            driver: Callable opening a DriverConnection from config
            policy: What to do after a failure is logged
        """
        self._config = config
        self._logger = logger
        self._driver = driver
        self._policy = FailurePolicy(policy)
        self._connection: Optional[DriverConnection] = None
        self._state = ConnectionState.DISCONNECTED
        self._parameters: list[BoundParameter] = []
        self._log = structlog.get_logger(__name__)

        self._connect()

    def __enter__(self) -> "QueryExecutor":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    @property
    def config(self) -> ConnectionConfig:
        return self._config

    @property
    def policy(self) -> FailurePolicy:
        return self._policy

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_connected(self) -> bool:
        return self._state == ConnectionState.CONNECTED

    @property
    def pending_parameters(self) -> tuple[BoundParameter, ...]:
        return tuple(self._parameters)

    # Binding

    def bind(self, name: str, value: Any) -> None:
        """Queue a value for the :name placeholder of the next query."""
        self._parameters.append(BoundParameter(placeholder=f":{name}", value=value))

    def bind_many(self, params: Optional[Mapping]) -> None:
        """
        Queue every key of `params`.

        Does nothing if parameters are already queued; values bound
        one by one take precedence over the mapping passed to a query.
        """
        if self._parameters:
            return
        if isinstance(params, Mapping):
            for name in params:
                self.bind(name, params[name])

    # Queries

    def query(
        self,
        sql: str,
        params: Optional[Mapping] = None,
        fetch_mode: FetchMode = FetchMode.ASSOC,
    ) -> Any:
        """
        Execute any statement.

        Returns:
            - all rows for SELECT / SHOW
            - the affected row count for INSERT / UPDATE / DELETE
            - None for anything else
        """
        sql = sql.replace("\r", " ").strip()
        statement = self._prepare_and_execute(sql, params)
        keyword = statement_keyword(sql)

        if keyword in ROW_STATEMENTS:
            return self._consume(sql, statement, lambda s: s.fetch_all(fetch_mode))
        if keyword in COUNT_STATEMENTS:
            return self._consume(sql, statement, lambda s: s.row_count())
        self._consume(sql, statement, lambda s: None)
        return None

    def row(
        self,
        sql: str,
        params: Optional[Mapping] = None,
        fetch_mode: FetchMode = FetchMode.ASSOC,
    ) -> Optional[Any]:
        """Return the first row, or None when the result is empty."""
        statement = self._prepare_and_execute(sql, params)
        return self._consume(sql, statement, lambda s: s.fetch(fetch_mode))

    def single(self, sql: str, params: Optional[Mapping] = None) -> Optional[Any]:
        """Return the first column of the first row."""
        statement = self._prepare_and_execute(sql, params)
        return self._consume(sql, statement, lambda s: s.fetch_column())

    def column(self, sql: str, params: Optional[Mapping] = None) -> list:
        """Return the first column of every row, in row order."""
        statement = self._prepare_and_execute(sql, params)
        rows = self._consume(sql, statement, lambda s: s.fetch_all(FetchMode.NUM))
        return [cells[0] for cells in rows]

    def last_insert_id(self) -> Any:
        self._ensure_connected()
        return self._connection.last_insert_id()

    # Transactions

    def begin_transaction(self) -> bool:
        return self._transaction("BEGIN", lambda c: c.begin_transaction())

    def commit(self) -> bool:
        return self._transaction("COMMIT", lambda c: c.commit())

    def rollback(self) -> bool:
        return self._transaction("ROLLBACK", lambda c: c.rollback())

    def close(self) -> None:
        """Release the connection. The next call reconnects."""
        connection, self._connection = self._connection, None
        self._state = ConnectionState.DISCONNECTED
        if connection is None:
            return
        try:
            connection.close()
        except DriverError as e:
            self._fail(e)
        self._log.debug("database_closed", driver=self._config.driver)

    # Internals

    def _connect(self) -> None:
        try:
            self._connection = self._driver(self._config)
        except DriverError as e:
            self._fail(e)
        self._state = ConnectionState.CONNECTED
        self._log.info(
            "database_connected",
            driver=self._config.driver,
            host=self._config.host,
            database=self._config.database,
        )

    def _ensure_connected(self) -> None:
        if self._state == ConnectionState.DISCONNECTED:
            self._connect()

    def _prepare_and_execute(self, sql: str, params: Optional[Mapping]) -> DriverStatement:
        """Every method which runs SQL goes through here."""
        try:
            self._ensure_connected()
            try:
                statement = self._connection.prepare(sql)
                self.bind_many(params)
                for parameter in self._parameters:
                    statement.bind_value(
                        parameter.placeholder,
                        parameter.value,
                        parameter.param_type,
                    )
                statement.execute()
            except DriverError as e:
                self._fail(e, sql)
        finally:
            self._parameters = []

        self._log.debug("query_executed", statement=statement_keyword(sql))
        return statement

    def _consume(
        self,
        sql: str,
        statement: DriverStatement,
        read: Callable[[DriverStatement], Any],
    ) -> Any:
        """Read a result then release the cursor."""
        try:
            result = read(statement)
            statement.close_cursor()
        except DriverError as e:
            self._fail(e, sql)
        return result

    def _transaction(self, sql: str, action: Callable[[DriverConnection], bool]) -> bool:
        self._ensure_connected()
        try:
            return action(self._connection)
        except DriverError as e:
            self._fail(e, sql)

    def _fail(self, error: DriverError, sql: Optional[str] = None) -> None:
        """Log a failure once, then raise or exit according to policy."""
        message = str(error) or "Unhandled Exception"
        if sql:
            message = f"{message}\r\nRaw SQL : {sql}"

        if self._logger is not None:
            self._logger.write(message)
        self._log.error("database_failure", message=message, policy=self._policy.value)

        if self._policy == FailurePolicy.EXIT:
            raise SystemExit(message) from error
        if sql is None:
            raise ConnectionFailure(message) from error
        raise StatementFailure(message, sql) from error


def create_query_executor(
    config: Optional[ConnectionConfig] = None,
    logger: Optional[LoggerInterface] = None,
    policy: Optional[FailurePolicy] = None,
) -> QueryExecutor:
    """
    Build an executor from application settings.

    Explicit arguments win over settings. The configured timezone
    becomes the default for dates and log timestamps.
    """
    settings = get_settings()
    Date.set_default_timezone(settings.app.timezone)
    return QueryExecutor(
        config or settings.database,
        logger=logger or create_logger(settings.logging),
        policy=policy or settings.app.failure_policy,
    )
