"""SQL engine port for the embedded relational engine.

This outbound port is the narrow capability surface the gateway needs from
the engine: open/close a connection, prepare/finalize a statement, reset it,
bind by position, step, read columns by index, and read connection counters.
Parsing SQL and running the compiled program stay behind this interface.

Positions passed to ``bind`` are 1-based, as on the engine's wire protocol.
Column indexes are 0-based.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Any, Protocol


# Result codes used by the gateway (subset of the engine's primary codes)
SQLITE_OK = 0
SQLITE_ERROR = 1
SQLITE_INTERNAL = 2
SQLITE_BUSY = 5
SQLITE_CANTOPEN = 14
SQLITE_MISUSE = 21
SQLITE_MISMATCH = 20
SQLITE_RANGE = 25


class EngineError(Exception):
    """Raised by an engine adapter when an engine call fails.

    Attributes:
        message: The engine's error message for the connection.
        code: The engine's result code.
    """

    def __init__(self, message: str, code: int = SQLITE_ERROR) -> None:
        super().__init__(message)
        self.message = message
        self.code = code


class EngineBindError(EngineError):
    """Raised when bound parameters do not fit the statement.

    The statement has not executed when this is raised.
    """


class EngineStatement(Protocol):
    """Protocol for one prepared statement.

    A statement belongs to exactly one connection and is used by exactly one
    operation. Parameters stay bound across ``reset``.
    """

    @abstractmethod
    def reset(self) -> None:
        """Rewind the statement so the next step starts from the beginning."""
        ...

    @abstractmethod
    def bind(self, position: int, value: Any) -> None:
        """Bind a wire value to a 1-based parameter position.

        Args:
            position: 1-based parameter index.
            value: None, int, float, str or bytes.

        Raises:
            EngineError: If the position or value is rejected.
        """
        ...

    @abstractmethod
    def step(self) -> bool:
        """Advance the statement.

        Returns:
            True if a row is available, False when the statement is done.

        Raises:
            EngineError: If execution fails.
        """
        ...

    @abstractmethod
    def column_count(self) -> int:
        """Return the number of result columns (0 for non-queries)."""
        ...

    @abstractmethod
    def column_name(self, index: int) -> str:
        """Return the name of a result column."""
        ...

    @abstractmethod
    def column_value(self, index: int) -> Any:
        """Return the current row's raw value in its storage class."""
        ...

    @abstractmethod
    def finalize(self) -> None:
        """Release the statement. It must not be used afterwards."""
        ...


class EngineConnection(Protocol):
    """Protocol for one open connection to a database file."""

    @abstractmethod
    def prepare(self, sql: str) -> EngineStatement:
        """Compile SQL text into a statement.

        Raises:
            EngineError: If the text cannot be compiled.
        """
        ...

    @abstractmethod
    def last_insert_rowid(self) -> int:
        """Return the rowid of the most recent successful insert."""
        ...

    @abstractmethod
    def total_changes(self) -> int:
        """Return rows changed since this connection was opened."""
        ...

    @abstractmethod
    def close(self) -> None:
        """Close the connection."""
        ...


class SQLEngine(Protocol):
    """Protocol for opening connections to a database file."""

    @abstractmethod
    def open(self, path: str) -> EngineConnection:
        """Open a connection in autocommit mode.

        Raises:
            EngineError: If the file cannot be opened.
        """
        ...
