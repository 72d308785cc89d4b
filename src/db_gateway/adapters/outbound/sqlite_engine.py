"""SQLite engine adapter.

This adapter implements the SQLEngine port on top of the standard library
``sqlite3`` module.

``sqlite3`` compiles, binds and runs a statement in a single
``Cursor.execute`` call, so the adapter collects bindings and executes on
the first ``step``. Errors the C API would report at prepare time (unknown
tables or columns) therefore surface from ``step``. ``prepare`` itself only
rejects text that cannot form a statement: empty input or an unterminated
literal or comment.

Connections are opened with ``isolation_level=None`` so every statement runs
in the engine's autocommit mode.

Thread Safety:
    A connection and its statements are used by one operation on one thread.
    ``check_same_thread`` is disabled so a synchronous caller and a worker
    may each open their own connections freely.
"""

from __future__ import annotations

import sqlite3
from typing import Any

from db_gateway.ports.outbound.sql_engine import (
    SQLITE_ERROR,
    SQLITE_MISMATCH,
    SQLITE_MISUSE,
    SQLITE_RANGE,
    EngineBindError,
    EngineError,
)

WIRE_TYPES = (int, float, str, bytes)


def _engine_error(exc: sqlite3.Error) -> EngineError:
    """Translate a sqlite3 exception into an EngineError.

    ``sqlite_errorcode`` is only present on Python 3.11+, and only on errors
    raised by the library itself.
    """
    code = getattr(exc, "sqlite_errorcode", None)
    if code is None:
        code = SQLITE_ERROR
    # Mismatched parameter counts are reported before anything executes
    if isinstance(exc, sqlite3.ProgrammingError) and "bindings" in str(exc):
        return EngineBindError(str(exc), SQLITE_RANGE)
    return EngineError(str(exc), code & 0xFF)


class SQLiteStatement:
    """One statement on one sqlite3 connection."""

    def __init__(self, connection: sqlite3.Connection, sql: str) -> None:
        self._sql = sql
        self._cursor: sqlite3.Cursor | None = connection.cursor()
        self._bindings: dict[int, Any] = {}
        self._executed = False
        self._done = False
        self._row: tuple[Any, ...] | None = None

    @property
    def sql(self) -> str:
        return self._sql

    def _require_open(self) -> sqlite3.Cursor:
        if self._cursor is None:
            raise EngineError("statement already finalized", SQLITE_MISUSE)
        return self._cursor

    def _parameters(self) -> tuple[Any, ...]:
        # Unbound positions below the highest bound one read as NULL
        if not self._bindings:
            return ()
        highest = max(self._bindings)
        return tuple(self._bindings.get(i) for i in range(1, highest + 1))

    def reset(self) -> None:
        self._require_open()
        self._executed = False
        self._done = False
        self._row = None

    def bind(self, position: int, value: Any) -> None:
        self._require_open()
        if position < 1:
            raise EngineError(f"bind position {position} out of range", SQLITE_RANGE)
        if value is not None and not isinstance(value, WIRE_TYPES):
            raise EngineError(
                f"datatype mismatch: cannot bind {type(value).__name__}", SQLITE_MISMATCH
            )
        self._bindings[position] = value

    def step(self) -> bool:
        cursor = self._require_open()
        if self._done:
            return False
        try:
            if not self._executed:
                cursor.execute(self._sql, self._parameters())
                self._executed = True
            row = cursor.fetchone()
        except sqlite3.Error as exc:
            self._done = True
            raise _engine_error(exc) from exc

        self._row = row
        if row is None:
            self._done = True
            return False
        return True

    def column_count(self) -> int:
        cursor = self._require_open()
        return len(cursor.description or ())

    def column_name(self, index: int) -> str:
        cursor = self._require_open()
        if cursor.description is None or not 0 <= index < len(cursor.description):
            raise EngineError(f"column index {index} out of range", SQLITE_RANGE)
        return cursor.description[index][0]

    def column_value(self, index: int) -> Any:
        self._require_open()
        if self._row is None:
            raise EngineError("no row available", SQLITE_MISUSE)
        if not 0 <= index < len(self._row):
            raise EngineError(f"column index {index} out of range", SQLITE_RANGE)
        return self._row[index]

    def finalize(self) -> None:
        if self._cursor is not None:
            self._cursor.close()
            self._cursor = None
            self._row = None


class SQLiteConnection:
    """One open sqlite3 connection."""

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._connection = connection

    def prepare(self, sql: str) -> SQLiteStatement:
        text = sql.strip()
        if not text:
            raise EngineError("empty SQL statement", SQLITE_MISUSE)
        terminated = text if text.endswith(";") else text + "\n;"
        if not sqlite3.complete_statement(terminated):
            raise EngineError(f"incomplete input: {text[:64]!r}", SQLITE_ERROR)
        try:
            return SQLiteStatement(self._connection, sql)
        except sqlite3.Error as exc:
            raise _engine_error(exc) from exc

    def last_insert_rowid(self) -> int:
        try:
            row = self._connection.execute("SELECT last_insert_rowid()").fetchone()
        except sqlite3.Error as exc:
            raise _engine_error(exc) from exc
        return int(row[0])

    def total_changes(self) -> int:
        return self._connection.total_changes

    def close(self) -> None:
        self._connection.close()


class SQLiteEngine:
    """SQLEngine implementation backed by the sqlite3 module.

    Attributes:
        timeout: Seconds a connection waits for a lock held by another
            connection before failing with SQLITE_BUSY.
    """

    def __init__(self, timeout: float = 5.0) -> None:
        self.timeout = timeout

    def open(self, path: str) -> SQLiteConnection:
        try:
            connection = sqlite3.connect(
                path,
                timeout=self.timeout,
                isolation_level=None,
                check_same_thread=False,
            )
        except sqlite3.Error as exc:
            raise _engine_error(exc) from exc
        return SQLiteConnection(connection)
