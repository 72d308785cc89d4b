"""Unit tests for the sqlite3 engine adapter."""

from __future__ import annotations

from pathlib import Path
from typing import Generator

import pytest

from db_gateway.adapters.outbound import SQLiteConnection, SQLiteEngine
from db_gateway.ports.outbound.sql_engine import (
    SQLITE_ERROR,
    SQLITE_MISMATCH,
    SQLITE_MISUSE,
    SQLITE_RANGE,
    EngineBindError,
    EngineError,
)


@pytest.fixture
def connection(temp_dir: Path) -> Generator[SQLiteConnection, None, None]:
    """Open a connection on a fresh file with one table."""
    conn = SQLiteEngine(timeout=1.0).open(str(temp_dir / "adapter.db"))
    stmt = conn.prepare("CREATE TABLE t (id INTEGER PRIMARY KEY, name TEXT, data BLOB)")
    stmt.step()
    stmt.finalize()
    yield conn
    conn.close()


def run(conn: SQLiteConnection, sql: str, *values: object) -> None:
    stmt = conn.prepare(sql)
    for position, value in enumerate(values, start=1):
        stmt.bind(position, value)
    stmt.step()
    stmt.finalize()


@pytest.mark.unit
class TestSQLiteStatement:
    """Tests for stepping statements."""

    def test_step_rows(self, connection: SQLiteConnection) -> None:
        run(connection, "INSERT INTO t (name, data) VALUES (?, ?)", "a", b"\x01")
        run(connection, "INSERT INTO t (name, data) VALUES (?, ?)", "b", None)

        stmt = connection.prepare("SELECT id, name, data FROM t ORDER BY id")
        assert stmt.step()
        assert stmt.column_count() == 3
        assert [stmt.column_name(i) for i in range(3)] == ["id", "name", "data"]
        assert [stmt.column_value(i) for i in range(3)] == [1, "a", b"\x01"]
        assert stmt.step()
        assert stmt.column_value(2) is None
        assert not stmt.step()
        assert not stmt.step()
        stmt.finalize()

    def test_unbound_parameters_fail_as_bind_errors(self, connection: SQLiteConnection) -> None:
        stmt = connection.prepare("SELECT ?, ?")
        stmt.bind(1, 1)

        with pytest.raises(EngineBindError) as exc_info:
            stmt.step()

        assert exc_info.value.code == SQLITE_RANGE

    def test_bind_rejects_non_wire_values(self, connection: SQLiteConnection) -> None:
        stmt = connection.prepare("SELECT ?")

        with pytest.raises(EngineError) as exc_info:
            stmt.bind(1, [1])

        assert exc_info.value.code == SQLITE_MISMATCH

    def test_bind_position_is_one_based(self, connection: SQLiteConnection) -> None:
        with pytest.raises(EngineError):
            connection.prepare("SELECT ?").bind(0, 1)

    def test_unknown_column_fails_on_step(self, connection: SQLiteConnection) -> None:
        """Schema errors surface when the statement first steps."""
        stmt = connection.prepare("SELECT missing_col FROM t")

        with pytest.raises(EngineError) as exc_info:
            stmt.step()

        assert "missing_col" in exc_info.value.message
        assert exc_info.value.code == SQLITE_ERROR

    def test_finalized_statement(self, connection: SQLiteConnection) -> None:
        stmt = connection.prepare("SELECT 1")
        stmt.finalize()
        stmt.finalize()

        with pytest.raises(EngineError) as exc_info:
            stmt.step()

        assert exc_info.value.code == SQLITE_MISUSE

    def test_reset_reexecutes(self, connection: SQLiteConnection) -> None:
        stmt = connection.prepare("SELECT 1")
        assert stmt.step()
        assert not stmt.step()
        stmt.reset()
        assert stmt.step()
        stmt.finalize()


@pytest.mark.unit
class TestSQLiteConnection:
    """Tests for connection-level operations."""

    @pytest.mark.parametrize("sql", ["", "   ", "\n"])
    def test_prepare_rejects_empty_sql(self, connection: SQLiteConnection, sql: str) -> None:
        with pytest.raises(EngineError) as exc_info:
            connection.prepare(sql)
        assert exc_info.value.code == SQLITE_MISUSE

    def test_prepare_rejects_incomplete_sql(self, connection: SQLiteConnection) -> None:
        with pytest.raises(EngineError, match="incomplete input"):
            connection.prepare("SELECT 'unterminated")

    def test_prepare_accepts_trailing_comment(self, connection: SQLiteConnection) -> None:
        stmt = connection.prepare("SELECT 1 -- one")
        assert stmt.step()
        stmt.finalize()

    def test_last_insert_rowid_and_changes(self, connection: SQLiteConnection) -> None:
        run(connection, "INSERT INTO t (name) VALUES ('x')")
        run(connection, "INSERT INTO t (name) VALUES ('y')")

        assert connection.last_insert_rowid() == 2
        assert connection.total_changes() == 2

    def test_autocommit(self, connection: SQLiteConnection, temp_dir: Path) -> None:
        """Writes are visible to other connections without a commit."""
        run(connection, "INSERT INTO t (name) VALUES ('x')")

        other = SQLiteEngine().open(str(temp_dir / "adapter.db"))
        stmt = other.prepare("SELECT COUNT(*) FROM t")
        stmt.step()
        assert stmt.column_value(0) == 1
        stmt.finalize()
        other.close()
