"""Database gateway - the public operation surface.

This module provides the DatabaseGateway class that ties together the value
codec, row mapper, statement sessions, the serialized execution queue and
the schema version gate.

Usage:
    from db_gateway import DatabaseGateway

    with DatabaseGateway("app.db", schema_version=2, observer=MyObserver()) as db:
        row_id = db.insert("INSERT INTO users (name) VALUES (?)", ["Alice"]).result()
        users = db.query_typed(User, "SELECT * FROM users").result()
        count = db.scalar_int_sync("SELECT COUNT(*) FROM users", default=0)

Every deferred operation has a ``*_sync`` twin that runs the same
open/prepare/bind/step/finalize/close sequence on the calling thread and
raises instead of resolving a failed future.
"""

from __future__ import annotations

import time
from concurrent.futures import Executor, Future, wait
from pathlib import Path
from typing import Any, Callable, TypeVar

from db_gateway.adapters.outbound.sqlite_engine import SQLiteEngine
from db_gateway.application.execution_queue import ExecutionQueue
from db_gateway.application.schema_gate import SchemaVersionGate
from db_gateway.application.statement_session import StatementSession
from db_gateway.domain.services import RowMapper, ValueCodec
from db_gateway.domain.value_objects import GateState, RowId, SchemaVersion
from db_gateway.infrastructure.config import Config
from db_gateway.infrastructure.logging import get_logger
from db_gateway.infrastructure.metrics import MetricsRegistry, get_metrics
from db_gateway.infrastructure.observability import setup_observability
from db_gateway.infrastructure.tracing import trace_span
from db_gateway.ports.inbound.database import Args, RowMapping
from db_gateway.ports.inbound.errors import DatabaseError, UnexpectedError
from db_gateway.ports.inbound.lifecycle import LifecycleObserver
from db_gateway.ports.outbound.sql_engine import (
    SQLITE_INTERNAL,
    EngineConnection,
    EngineStatement,
    SQLEngine,
)

T = TypeVar("T")

Extractor = Callable[[EngineConnection, EngineStatement], T]


class DatabaseGateway:
    """Typed access to one SQLite database file.

    The gateway holds no open connection. Each operation opens a connection,
    runs one statement and closes it again.

    Thread Safety:
        All methods may be called from any thread. Deferred operations
        without an ``executor`` run one at a time in submission order.
        Once an observer is attached, no operation reaches the file before
        its lifecycle callbacks have finished.
    """

    def __init__(
        self,
        path: str | Path,
        schema_version: int = 0,
        observer: LifecycleObserver | None = None,
        *,
        engine: SQLEngine | None = None,
        metrics: MetricsRegistry | None = None,
        thread_name_prefix: str = "db_gateway",
    ) -> None:
        """Initialize the gateway.

        Args:
            path: Database file path. A missing file is created on first use.
            schema_version: Target schema version for the lifecycle observer.
            observer: If given, attached immediately (see ``attach``).
            engine: SQL engine adapter (default: sqlite3).
            metrics: Metrics registry (default: the global registry).
            thread_name_prefix: Name prefix of the serialized worker thread.
        """
        self._path = str(path)
        self._engine = engine or SQLiteEngine()
        self._metrics = metrics or get_metrics()
        self._logger = get_logger(__name__, path=self._path)

        self._session = StatementSession(self._engine, self._path, self._metrics)
        self._mapper = RowMapper(ValueCodec())
        self._gate = SchemaVersionGate(self._session, schema_version, self._metrics)
        self._queue = ExecutionQueue(thread_name_prefix, self._metrics)
        self._observer: LifecycleObserver | None = None
        self._attaching: Future[GateState] | None = None

        if observer is not None:
            self.attach(observer).add_done_callback(self._log_attach_failure)

    @classmethod
    def from_config(
        cls,
        config: Config,
        observer: LifecycleObserver | None = None,
        *,
        engine: SQLEngine | None = None,
        metrics: MetricsRegistry | None = None,
        configure_observability: bool = False,
    ) -> DatabaseGateway:
        """Create a gateway from configuration.

        With ``configure_observability`` the config's ``observability`` section
        is applied first (logging, tracing export, metrics server), and the
        gateway reports to the resulting registry unless ``metrics`` is given.
        """
        if configure_observability:
            configured = setup_observability(config.observability)
            metrics = metrics or configured
        return cls(
            config.database.path,
            config.database.schema_version,
            observer,
            engine=engine or SQLiteEngine(timeout=config.database.busy_timeout_seconds),
            metrics=metrics,
            thread_name_prefix=config.execution.thread_name_prefix,
        )

    @property
    def path(self) -> str:
        return self._path

    @property
    def target_version(self) -> SchemaVersion:
        return self._gate.target_version

    @property
    def gate_state(self) -> GateState:
        """State reached by the most recent attachment."""
        return self._gate.state

    @property
    def observer(self) -> LifecycleObserver | None:
        return self._observer

    # -- Schema lifecycle -------------------------------------------------

    def attach(self, observer: LifecycleObserver) -> Future[GateState]:
        """Attach a lifecycle observer.

        The create/upgrade/open sequence runs on the serialized queue, ahead
        of any operation submitted to the queue afterwards. Synchronous calls
        and operations on a caller-supplied executor block until the sequence
        has finished; calls made from the lifecycle callbacks do not.
        Reattaching runs the whole sequence again.
        """
        self._observer = observer
        attaching = self._queue.submit(self._gate.attach, self, observer)
        self._attaching = attaching
        return attaching

    def attach_sync(self, observer: LifecycleObserver) -> GateState:
        """Attach an observer and wait for the lifecycle to finish."""
        return self.attach(observer).result()

    def schema_version(self) -> SchemaVersion:
        """Read the persisted schema version (0 if absent or unreadable)."""
        return self._gate.read_version()

    def _log_attach_failure(self, future: Future[GateState]) -> None:
        exc = future.exception()
        if exc is not None:
            self._logger.error("observer_callback_failed", error=repr(exc))

    # -- Operation plumbing -----------------------------------------------

    def _await_attachment(self) -> None:
        # Lifecycle callbacks run on the worker while the attachment is pending
        attaching = self._attaching
        if attaching is None or attaching.done() or self._queue.on_worker():
            return
        wait((attaching,))

    def _perform(self, operation: str, sql: str, args: Args, extract: Extractor[T]) -> T:
        self._await_attachment()
        codec = self._mapper.codec

        def body(connection: EngineConnection, statement: EngineStatement) -> T:
            codec.bind_all(statement, args)
            return extract(connection, statement)

        attributes = {"db.system": "sqlite", "db.operation": operation, "db.statement": sql}
        start = time.perf_counter()
        with trace_span(f"db_gateway.{operation}", attributes):
            try:
                result = self._session.run(sql, body)
            except DatabaseError as exc:
                self._record_failure(operation, exc)
                raise
            except Exception as exc:
                error = UnexpectedError(f"{type(exc).__name__}: {exc}", SQLITE_INTERNAL)
                self._record_failure(operation, error)
                raise error from exc
            finally:
                self._metrics.operation_latency_seconds.labels(operation=operation).observe(
                    time.perf_counter() - start
                )

        self._metrics.operations_total.labels(operation=operation, status="success").inc()
        return result

    def _record_failure(self, operation: str, exc: DatabaseError) -> None:
        self._metrics.operations_total.labels(operation=operation, status="error").inc()
        self._metrics.operation_errors_total.labels(kind=exc.kind).inc()
        self._logger.warning(
            "operation_failed",
            operation=operation,
            kind=exc.kind,
            error=exc.message,
            code=exc.code,
        )

    def _submit(self, fn: Callable[..., T], *args: Any, executor: Executor | None) -> Future[T]:
        return self._queue.submit(fn, *args, executor=executor)

    @staticmethod
    def _step_once(statement: EngineStatement) -> None:
        # A row (RETURNING, reporting pragmas) counts as success too
        statement.step()

    # -- Synchronous operations -------------------------------------------

    def exec_sync(self, sql: str, args: Args = None) -> None:
        """Execute one statement, discarding any result.

        Raises:
            DatabaseError: On any failure.
        """

        def extract(_conn: EngineConnection, statement: EngineStatement) -> None:
            self._step_once(statement)

        return self._perform("exec", sql, args, extract)

    def run_sync(self, sql: str, args: Args = None) -> int:
        """Execute one statement and return the number of rows it changed."""

        def extract(connection: EngineConnection, statement: EngineStatement) -> int:
            self._step_once(statement)
            return connection.total_changes()

        return self._perform("run", sql, args, extract)

    def insert_sync(self, sql: str, args: Args = None) -> RowId:
        """Execute one statement and return the last inserted rowid."""

        def extract(connection: EngineConnection, statement: EngineStatement) -> RowId:
            self._step_once(statement)
            return RowId(connection.last_insert_rowid())

        return self._perform("insert", sql, args, extract)

    def query_sync(self, sql: str, args: Args = None) -> list[RowMapping]:
        """Return every row as a column-name mapping."""
        return self._perform("query", sql, args, lambda _conn, stmt: self._mapper.collect(stmt))

    def query_typed_sync(self, target: type[T], sql: str, args: Args = None) -> list[T]:
        """Return every row decoded into ``target``.

        Raises:
            DecodeFailedError: If any row fails to decode. No rows are returned.
        """

        def extract(_conn: EngineConnection, statement: EngineStatement) -> list[T]:
            schema = self._mapper.schema_for(target)
            return self._mapper.collect(statement, schema)

        return self._perform("query_typed", sql, args, extract)

    def query_first_sync(
        self, sql: str, args: Args = None, target: type[T] | None = None
    ) -> T | RowMapping | None:
        """Return the first row (mapping, or ``target`` if given), or None."""

        def extract(_conn: EngineConnection, statement: EngineStatement) -> Any:
            schema = self._mapper.schema_for(target) if target is not None else None
            rows = self._mapper.collect(statement, schema, limit=1)
            return rows[0] if rows else None

        return self._perform("query_first", sql, args, extract)

    def scalar_int_sync(self, sql: str, args: Args = None, default: int | None = None) -> int | None:
        """Return column 0 of the first row as an integer, or ``default``."""
        return self._perform(
            "scalar_int", sql, args, lambda _conn, stmt: self._mapper.scalar(stmt, int, default)
        )

    def scalar_string_sync(
        self, sql: str, args: Args = None, default: str | None = None
    ) -> str | None:
        """Return column 0 of the first row as text, or ``default``."""
        return self._perform(
            "scalar_string", sql, args, lambda _conn, stmt: self._mapper.scalar(stmt, str, default)
        )

    # -- Deferred operations ----------------------------------------------

    def exec(self, sql: str, args: Args = None, *, executor: Executor | None = None) -> Future[None]:
        """Deferred ``exec_sync``."""
        return self._submit(self.exec_sync, sql, args, executor=executor)

    def run(self, sql: str, args: Args = None, *, executor: Executor | None = None) -> Future[int]:
        """Deferred ``run_sync``."""
        return self._submit(self.run_sync, sql, args, executor=executor)

    def insert(self, sql: str, args: Args = None, *, executor: Executor | None = None) -> Future[RowId]:
        """Deferred ``insert_sync``."""
        return self._submit(self.insert_sync, sql, args, executor=executor)

    def query(
        self, sql: str, args: Args = None, *, executor: Executor | None = None
    ) -> Future[list[RowMapping]]:
        """Deferred ``query_sync``."""
        return self._submit(self.query_sync, sql, args, executor=executor)

    def query_typed(
        self, target: type[T], sql: str, args: Args = None, *, executor: Executor | None = None
    ) -> Future[list[T]]:
        """Deferred ``query_typed_sync``."""
        return self._submit(self.query_typed_sync, target, sql, args, executor=executor)

    def query_first(
        self,
        sql: str,
        args: Args = None,
        target: type[T] | None = None,
        *,
        executor: Executor | None = None,
    ) -> Future[T | RowMapping | None]:
        """Deferred ``query_first_sync``."""
        return self._submit(self.query_first_sync, sql, args, target, executor=executor)

    def scalar_int(
        self,
        sql: str,
        args: Args = None,
        default: int | None = None,
        *,
        executor: Executor | None = None,
    ) -> Future[int | None]:
        """Deferred ``scalar_int_sync``."""
        return self._submit(self.scalar_int_sync, sql, args, default, executor=executor)

    def scalar_string(
        self,
        sql: str,
        args: Args = None,
        default: str | None = None,
        *,
        executor: Executor | None = None,
    ) -> Future[str | None]:
        """Deferred ``scalar_string_sync``."""
        return self._submit(self.scalar_string_sync, sql, args, default, executor=executor)

    # -- Shutdown ---------------------------------------------------------

    def close(self) -> None:
        """Stop the serialized worker after pending operations finish."""
        self._queue.shutdown(wait=True)

    def __enter__(self) -> DatabaseGateway:
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.close()

    def __repr__(self) -> str:
        return f"DatabaseGateway(path={self._path!r}, target_version={self.target_version})"
