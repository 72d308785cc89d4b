"""Database port - the public operation surface.

Every operation opens its own connection, prepares one statement, binds the
positional arguments, steps, extracts its result, then finalizes and closes.
Deferred operations run on the database's serialized worker unless an
``executor`` is given, and return a ``concurrent.futures.Future``. Failures
resolve the future with a ``DatabaseError`` subclass.

Ordering:
    Operations submitted without an executor run one at a time in
    submission order. Operations on other executors have no ordering
    guarantee relative to them.

Transactions:
    None are started. Each call runs its single SQL statement in the
    engine's autocommit mode.
"""

from __future__ import annotations

from abc import abstractmethod
from concurrent.futures import Executor, Future
from typing import Any, Protocol, Sequence, TypeVar

from db_gateway.domain.value_objects import GateState, RowId, SchemaVersion
from db_gateway.ports.inbound.lifecycle import LifecycleObserver

T = TypeVar("T")

Args = Sequence[Any] | None
"""Positional arguments: plain values or Parameter variants. None binds NULL."""

RowMapping = dict[str, Any]
"""One result row: column name to naturally decoded value, in column order."""


class Database(Protocol):
    """Protocol for the typed database access layer."""

    @property
    @abstractmethod
    def path(self) -> str:
        """Path of the database file."""
        ...

    @abstractmethod
    def attach(self, observer: LifecycleObserver) -> Future[GateState]:
        """Run the schema lifecycle for an observer on the serialized worker."""
        ...

    @abstractmethod
    def schema_version(self) -> SchemaVersion:
        """Read the persisted schema version (0 if absent or unreadable)."""
        ...

    @abstractmethod
    def exec(self, sql: str, args: Args = None, *, executor: Executor | None = None) -> Future[None]:
        """Execute one statement, discarding any result."""
        ...

    @abstractmethod
    def run(self, sql: str, args: Args = None, *, executor: Executor | None = None) -> Future[int]:
        """Execute one statement and return the number of rows it changed."""
        ...

    @abstractmethod
    def insert(self, sql: str, args: Args = None, *, executor: Executor | None = None) -> Future[RowId]:
        """Execute one statement and return the last inserted rowid."""
        ...

    @abstractmethod
    def query(
        self, sql: str, args: Args = None, *, executor: Executor | None = None
    ) -> Future[list[RowMapping]]:
        """Return every row as a column-name mapping."""
        ...

    @abstractmethod
    def query_typed(
        self, target: type[T], sql: str, args: Args = None, *, executor: Executor | None = None
    ) -> Future[list[T]]:
        """Return every row decoded into ``target``."""
        ...

    @abstractmethod
    def query_first(
        self,
        sql: str,
        args: Args = None,
        target: type[T] | None = None,
        *,
        executor: Executor | None = None,
    ) -> Future[T | RowMapping | None]:
        """Return the first row (mapping, or ``target`` if given), or None."""
        ...

    @abstractmethod
    def scalar_int(
        self,
        sql: str,
        args: Args = None,
        default: int | None = None,
        *,
        executor: Executor | None = None,
    ) -> Future[int | None]:
        """Return column 0 of the first row as an integer, or ``default``."""
        ...

    @abstractmethod
    def scalar_string(
        self,
        sql: str,
        args: Args = None,
        default: str | None = None,
        *,
        executor: Executor | None = None,
    ) -> Future[str | None]:
        """Return column 0 of the first row as text, or ``default``."""
        ...

    @abstractmethod
    def exec_sync(self, sql: str, args: Args = None) -> None:
        """Blocking variant of ``exec``; raises instead of resolving a failure."""
        ...

    @abstractmethod
    def query_first_sync(
        self, sql: str, args: Args = None, target: type[T] | None = None
    ) -> T | RowMapping | None:
        """Blocking variant of ``query_first``."""
        ...

    @abstractmethod
    def scalar_int_sync(self, sql: str, args: Args = None, default: int | None = None) -> int | None:
        """Blocking variant of ``scalar_int``."""
        ...

    @abstractmethod
    def close(self) -> None:
        """Stop the serialized worker after pending operations finish."""
        ...
