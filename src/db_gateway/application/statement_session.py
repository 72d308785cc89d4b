"""Statement session: one connection and one statement per call.

A session is the scoped acquisition every operation runs inside:

    open connection -> prepare -> reset -> body(connection, statement)
                    -> finalize -> close

The statement is finalized and the connection closed on every exit path,
including errors raised by the body. No transaction is started; each call
runs under the engine's autocommit mode.

Engine errors are classified here:
    - open and prepare failures -> OpenFailedError
    - parameter mismatches reported by the engine -> BindFailedError
    - any other engine failure inside the body -> QueryFailedError
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Callable, Iterator, TypeVar

from db_gateway.infrastructure.logging import get_logger
from db_gateway.infrastructure.metrics import MetricsRegistry, get_metrics
from db_gateway.ports.inbound.errors import (
    BindFailedError,
    OpenFailedError,
    QueryFailedError,
)
from db_gateway.ports.outbound.sql_engine import (
    EngineBindError,
    EngineConnection,
    EngineError,
    EngineStatement,
    SQLEngine,
)

T = TypeVar("T")

SessionBody = Callable[[EngineConnection, EngineStatement], T]


class StatementSession:
    """Runs one SQL statement against a database file.

    Sessions hold no engine resources between calls and may be used from
    several threads at once; each call opens its own connection.
    """

    def __init__(
        self,
        engine: SQLEngine,
        path: str,
        metrics: MetricsRegistry | None = None,
    ) -> None:
        self._engine = engine
        self._path = path
        self._metrics = metrics or get_metrics()
        self._logger = get_logger(__name__, path=path)

    @property
    def path(self) -> str:
        return self._path

    @contextmanager
    def connect(self) -> Iterator[EngineConnection]:
        """Open a connection, closing it when the block exits.

        Raises:
            OpenFailedError: If the file cannot be opened.
        """
        try:
            connection = self._engine.open(self._path)
        except EngineError as exc:
            raise OpenFailedError(exc.message, exc.code) from exc

        self._metrics.connections_opened_total.inc()
        self._metrics.sessions_active.inc()
        try:
            yield connection
        finally:
            connection.close()
            self._metrics.sessions_active.dec()
            self._logger.debug("session_closed")

    @contextmanager
    def prepare(self, connection: EngineConnection, sql: str) -> Iterator[EngineStatement]:
        """Prepare and reset a statement, finalizing it when the block exits.

        Raises:
            OpenFailedError: If the SQL text cannot be prepared.
        """
        try:
            statement = connection.prepare(sql)
        except EngineError as exc:
            raise OpenFailedError(exc.message, exc.code) from exc

        try:
            statement.reset()
            self._logger.debug("statement_prepared", sql=sql)
            yield statement
        finally:
            statement.finalize()

    def run(self, sql: str, body: SessionBody[T]) -> T:
        """Run ``body`` with a fresh connection and prepared statement.

        Args:
            sql: A single SQL statement.
            body: Binds, steps and extracts the result.

        Returns:
            Whatever ``body`` returns.

        Raises:
            OpenFailedError: If the connection or statement cannot be obtained.
            BindFailedError: If the engine rejects the bound parameters.
            QueryFailedError: If the engine fails while stepping.
            DatabaseError: Any gateway error raised by ``body`` itself.
        """
        with self.connect() as connection, self.prepare(connection, sql) as statement:
            try:
                return body(connection, statement)
            except EngineBindError as exc:
                raise BindFailedError(exc.message, exc.code) from exc
            except EngineError as exc:
                raise QueryFailedError(exc.message, exc.code) from exc
