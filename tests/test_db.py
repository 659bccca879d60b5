"""
Tests for the QueryExecutor

Test strategy:
1. A fake driver records every prepare / typed bind / execute
2. No database server is needed (see test_sqlite.py for a real driver)
"""

import pytest

from floatkit.config.settings import ConnectionConfig
from floatkit.connection.db import QueryExecutor
from floatkit.connection.interface import (
    ConnectionFailure,
    DriverConnection,
    DriverError,
    DriverStatement,
    StatementFailure,
)
from floatkit.logs.logger import LoggerInterface
from floatkit.models.database import (
    ConnectionState,
    FailurePolicy,
    FetchMode,
    ParamType,
)


class RecordingLogger(LoggerInterface):
    def __init__(self):
        self.messages = []

    def write(self, message):
        self.messages.append(message)


class FakeStatement(DriverStatement):
    def __init__(self, driver, sql):
        self.driver = driver
        self.sql = sql
        self.binds = []
        self.executed = False
        self.closed = False
        self._position = 0

    def bind_value(self, placeholder, value, param_type):
        self.binds.append((placeholder, value, param_type))

    def execute(self):
        if self.driver.fail_execute:
            raise DriverError(self.driver.fail_execute)
        self.executed = True

    def _shape(self, row, mode):
        if mode == FetchMode.NUM:
            return tuple(row.values())
        return dict(row)

    def fetch_all(self, mode=FetchMode.ASSOC):
        rows = self.driver.rows[self._position:]
        self._position = len(self.driver.rows)
        return [self._shape(row, mode) for row in rows]

    def fetch(self, mode=FetchMode.ASSOC):
        if self._position >= len(self.driver.rows):
            return None
        row = self.driver.rows[self._position]
        self._position += 1
        return self._shape(row, mode)

    def fetch_column(self):
        row = self.fetch(FetchMode.NUM)
        return None if row is None else row[0]

    def row_count(self):
        return self.driver.affected

    def close_cursor(self):
        self.closed = True


class FakeConnection(DriverConnection):
    def __init__(self, driver):
        self.driver = driver
        self.statements = []
        self.calls = []
        self.closed = False

    def prepare(self, sql):
        statement = FakeStatement(self.driver, sql)
        self.statements.append(statement)
        return statement

    def last_insert_id(self):
        return self.driver.last_id

    def begin_transaction(self):
        self.calls.append("begin")
        return True

    def commit(self):
        if self.driver.fail_commit:
            raise DriverError(self.driver.fail_commit)
        self.calls.append("commit")
        return True

    def rollback(self):
        self.calls.append("rollback")
        return True

    def close(self):
        self.closed = True


class FakeDriver:
    """Driver factory handing out FakeConnections."""

    def __init__(self, rows=None, affected=0, last_id=None):
        self.rows = rows or []
        self.affected = affected
        self.last_id = last_id
        self.fail_connect = None
        self.fail_execute = None
        self.fail_commit = None
        self.configs = []
        self.connections = []

    def __call__(self, config):
        self.configs.append(config)
        if self.fail_connect:
            raise DriverError(self.fail_connect)
        connection = FakeConnection(self)
        self.connections.append(connection)
        return connection

    @property
    def statement(self):
        return self.connections[-1].statements[-1]


USERS = [
    {"id": 1, "name": "Alice"},
    {"id": 2, "name": "Bob"},
    {"id": 3, "name": "Carol"},
]


@pytest.fixture
def config():
    return ConnectionConfig(driver="sqlite", database=":memory:")


@pytest.fixture
def driver():
    return FakeDriver(rows=list(USERS), affected=2, last_id=42)


@pytest.fixture
def logger():
    return RecordingLogger()


@pytest.fixture
def db(config, driver, logger):
    return QueryExecutor(config, logger=logger, driver=driver)


class TestBinding:
    """Tests for bind / bind_many."""

    def test_bind_prefixes_placeholder(self, db):
        """Test that bind stores the name with a leading colon."""
        db.bind("name", "John")
        db.bind("age", 30)
        placeholders = [(p.placeholder, p.value) for p in db.pending_parameters]
        assert placeholders == [(":name", "John"), (":age", 30)]

    def test_bind_allows_duplicates(self, db):
        """Test that binding the same name twice keeps both entries."""
        db.bind("id", 1)
        db.bind("id", 2)
        assert len(db.pending_parameters) == 2

    def test_bind_many_populates_when_empty(self, db):
        """Test bind_many with an empty buffer."""
        db.bind_many({"name": "John", "age": 30})
        assert [p.name for p in db.pending_parameters] == ["name", "age"]

    def test_bind_many_is_noop_when_pending(self, db):
        """Test that bind_many never merges into queued parameters."""
        db.bind("id", 1)
        db.bind_many({"name": "John", "age": 30})
        assert [p.name for p in db.pending_parameters] == ["id"]

    def test_bind_many_ignores_non_mapping(self, db):
        """Test that bind_many ignores None and sequences."""
        db.bind_many(None)
        db.bind_many(["name", "John"])
        assert db.pending_parameters == ()

    def test_prebound_values_win_over_query_params(self, db, driver):
        """Test that params passed to a query are dropped when values were bound first."""
        db.bind("id", 1)
        db.query("SELECT * FROM users WHERE id = :id", {"id": 2})
        assert driver.statement.binds == [(":id", 1, ParamType.INT)]


class TestTypeInference:
    """Tests for typed binds."""

    def test_types_sent_to_driver(self, db, driver):
        """Test int/bool/null/str precedence in the binds the driver receives."""
        db.query(
            "SELECT * FROM users WHERE id = :id",
            {"id": 5, "active": True, "deleted": None, "name": "x", "score": 1.5},
        )
        types = [(name, param_type) for name, _, param_type in driver.statement.binds]
        assert types == [
            (":id", ParamType.INT),
            (":active", ParamType.BOOL),
            (":deleted", ParamType.NULL),
            (":name", ParamType.STR),
            (":score", ParamType.STR),
        ]

    def test_bool_is_not_int(self):
        """Test that Python booleans are classified as BOOL."""
        assert ParamType.infer(True) == ParamType.BOOL
        assert ParamType.infer(False) == ParamType.BOOL
        assert ParamType.infer(0) == ParamType.INT

    def test_numeric_string_stays_string(self):
        """Test that digit strings are not promoted to INT."""
        assert ParamType.infer("42") == ParamType.STR


class TestPendingParameters:
    """Tests that binding is scoped to one execution."""

    def test_cleared_after_success(self, db):
        """Test the buffer is empty after a successful query."""
        db.bind("id", 1)
        db.row("SELECT * FROM users WHERE id = :id")
        assert db.pending_parameters == ()

    def test_cleared_after_failure(self, db, driver):
        """Test the buffer is empty after a failed query."""
        driver.fail_execute = "syntax error"
        db.bind("id", 1)
        with pytest.raises(StatementFailure):
            db.query("SELEC * FROM users WHERE id = :id")
        assert db.pending_parameters == ()

    def test_cleared_for_each_helper(self, db):
        """Test single and column also clear the buffer."""
        for method in (db.single, db.column):
            db.bind("id", 1)
            method("SELECT id FROM users WHERE id = :id")
            assert db.pending_parameters == ()


class TestQueryDispatch:
    """Tests for query() return shapes."""

    def test_select_returns_rows(self, db):
        """Test SELECT returns every row as a mapping."""
        assert db.query("SELECT * FROM users") == USERS

    def test_select_is_case_insensitive(self, db, driver):
        """Test lower-case select behaves the same."""
        assert db.query("select * from users") == USERS

    def test_select_numeric_fetch_mode(self, db):
        """Test NUM fetch mode returns positional rows."""
        rows = db.query("SELECT * FROM users", fetch_mode=FetchMode.NUM)
        assert rows[0] == (1, "Alice")

    def test_show_returns_rows(self, db):
        """Test SHOW is treated like SELECT."""
        assert len(db.query("SHOW TABLES")) == 3

    def test_whitespace_is_normalized(self, db, driver):
        """Test carriage returns and leading whitespace are removed."""
        assert db.query("\r\n  SELECT *\r\nFROM users") == USERS
        assert driver.statement.sql.startswith("SELECT")

    def test_update_returns_row_count(self, db):
        """Test UPDATE returns the affected row count."""
        result = db.query("UPDATE users SET name = :name", {"name": "x"})
        assert result == 2
        assert isinstance(result, int)

    @pytest.mark.parametrize("sql", [
        "INSERT INTO users (name) VALUES ('x')",
        "delete from users",
    ])
    def test_insert_and_delete_return_row_count(self, db, sql):
        """Test INSERT and DELETE return the affected row count."""
        assert db.query(sql) == 2

    def test_other_statements_return_none(self, db):
        """Test DDL returns None."""
        assert db.query("CREATE TABLE t (id INT)") is None

    def test_cursor_released_after_query(self, db, driver):
        """Test query() closes the cursor."""
        db.query("SELECT * FROM users")
        assert driver.statement.closed is True


class TestRowSingleColumn:
    """Tests for row, single and column."""

    def test_row_returns_first_record(self, db, driver):
        """Test row returns one mapping and releases the cursor."""
        assert db.row("SELECT * FROM users") == USERS[0]
        assert driver.statement.closed is True

    def test_row_on_empty_result(self, db, driver):
        """Test row returns None on an empty result and the next query still runs."""
        driver.rows = []
        assert db.row("SELECT * FROM users WHERE id = :id", {"id": 99}) is None
        assert driver.statement.closed is True
        assert db.query("UPDATE users SET name = 'x'") == 2
        assert len(driver.connections) == 1

    def test_single_returns_scalar(self, db, driver):
        """Test single returns the first column of the first row."""
        driver.rows = [{"count": 3}]
        assert db.single("SELECT count(*) FROM users") == 3
        assert driver.statement.closed is True

    def test_column_preserves_order(self, db):
        """Test column returns only the first column, in row order."""
        assert db.column("SELECT id FROM users") == [1, 2, 3]

    def test_column_on_empty_result(self, db, driver):
        """Test column returns an empty list when there are no rows."""
        driver.rows = []
        assert db.column("SELECT id FROM users") == []


class TestFailures:
    """Tests for connection and statement failures."""

    def test_connect_failure_exits(self, config, logger):
        """Test connect failure logs once without SQL, then terminates."""
        driver = FakeDriver()
        driver.fail_connect = "Access denied for user"
        with pytest.raises(SystemExit) as exc_info:
            QueryExecutor(config, logger=logger, driver=driver, policy=FailurePolicy.EXIT)
        assert logger.messages == ["Access denied for user"]
        assert "Raw SQL" not in logger.messages[0]
        assert str(exc_info.value) == "Access denied for user"

    def test_connect_failure_raises(self, config, logger):
        """Test connect failure raises ConnectionFailure under RAISE."""
        driver = FakeDriver()
        driver.fail_connect = "Unknown host"
        with pytest.raises(ConnectionFailure, match="Unknown host"):
            QueryExecutor(config, logger=logger, driver=driver)
        assert len(logger.messages) == 1

    def test_execute_failure_logs_sql(self, db, driver, logger):
        """Test execute failure logs the message and raw SQL once."""
        driver.fail_execute = "Table 'users' doesn't exist"
        sql = "UPDATE users SET name = :name"
        with pytest.raises(StatementFailure) as exc_info:
            db.query(sql, {"name": "x"})
        assert logger.messages == [f"Table 'users' doesn't exist\r\nRaw SQL : {sql}"]
        assert exc_info.value.sql == sql

    def test_execute_failure_exits(self, config, driver, logger):
        """Test execute failure terminates under EXIT."""
        db = QueryExecutor(config, logger=logger, driver=driver, policy="exit")
        driver.fail_execute = "boom"
        with pytest.raises(SystemExit):
            db.single("SELECT 1")
        assert len(logger.messages) == 1
        assert "Raw SQL : SELECT 1" in logger.messages[0]

    def test_empty_message_is_replaced(self, db, driver, logger):
        """Test a driver error without text is logged as unhandled."""
        class Silent(FakeStatement):
            def execute(self):
                raise DriverError()

        driver.connections[-1].prepare = lambda sql: Silent(driver, sql)
        with pytest.raises(StatementFailure):
            db.query("SELECT 1")
        assert logger.messages[0].startswith("Unhandled Exception")

    def test_transaction_failure(self, db, driver, logger):
        """Test a failing commit goes through the statement failure path."""
        driver.fail_commit = "deadlock"
        with pytest.raises(StatementFailure):
            db.commit()
        assert logger.messages == ["deadlock\r\nRaw SQL : COMMIT"]

    def test_works_without_logger(self, config, driver):
        """Test failures still raise when no logger is injected."""
        db = QueryExecutor(config, driver=driver)
        driver.fail_execute = "boom"
        with pytest.raises(StatementFailure):
            db.query("SELECT 1")


class TestLifecycle:
    """Tests for connection state, transactions and close."""

    def test_connects_on_construction(self, db, driver):
        """Test the executor connects immediately."""
        assert db.state == ConnectionState.CONNECTED
        assert db.is_connected is True
        assert len(driver.connections) == 1

    def test_close_then_reconnect(self, db, driver, config):
        """Test close releases the handle and the next query reconnects."""
        db.close()
        assert db.state == ConnectionState.DISCONNECTED
        assert driver.connections[0].closed is True

        db.query("SELECT * FROM users")
        assert db.is_connected is True
        assert len(driver.connections) == 2
        assert driver.configs == [config, config]

    def test_close_twice(self, db):
        """Test closing an already closed executor is harmless."""
        db.close()
        db.close()
        assert db.is_connected is False

    def test_context_manager_closes(self, config, driver):
        """Test leaving the with block closes the connection."""
        with QueryExecutor(config, driver=driver) as db:
            db.query("SELECT * FROM users")
        assert driver.connections[0].closed is True
        assert db.state == ConnectionState.DISCONNECTED

    def test_transactions_pass_through(self, db, driver):
        """Test begin/commit/rollback reach the connection and return True."""
        assert db.begin_transaction() is True
        assert db.commit() is True
        assert db.rollback() is True
        assert driver.connections[0].calls == ["begin", "commit", "rollback"]

    def test_last_insert_id(self, db):
        """Test last_insert_id comes from the connection."""
        assert db.last_insert_id() == 42

    def test_last_insert_id_reconnects(self, db, driver):
        """Test last_insert_id reconnects when closed."""
        db.close()
        db.last_insert_id()
        assert len(driver.connections) == 2


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
