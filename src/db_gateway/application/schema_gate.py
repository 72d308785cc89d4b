"""Schema version gate: the create / upgrade / open lifecycle.

The gate compares the version persisted in ``PRAGMA user_version`` with the
database's target version and drives a lifecycle observer through:

    1. file missing   -> on_create_database, persist target    (CREATED)
       path is a dir  -> on_error(OpenFailedError), stop        (FAILED)
    2. stored < target -> on_upgrade(stored, target), persist   (VERSION_CHECKED)
    3. always          -> on_open_database                      (READY)

The version is only ever advanced. Reading and writing it use their own
short-lived sessions. The database runs ``attach`` on its serialized queue,
so attachment is ordered with respect to operations on that queue.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from db_gateway.application.statement_session import StatementSession
from db_gateway.domain.value_objects import (
    INITIAL_SCHEMA_VERSION,
    GateState,
    SchemaVersion,
    validate_schema_version,
)
from db_gateway.infrastructure.logging import get_logger
from db_gateway.infrastructure.metrics import MetricsRegistry, get_metrics
from db_gateway.ports.inbound.errors import DatabaseError, OpenFailedError
from db_gateway.ports.outbound.sql_engine import SQLITE_CANTOPEN

if TYPE_CHECKING:
    from db_gateway.ports.inbound.database import Database
    from db_gateway.ports.inbound.lifecycle import LifecycleObserver


class SchemaVersionGate:
    """Runs the schema lifecycle for one database file.

    Attributes:
        target_version: The version the schema is brought up to.
        state: State reached by the most recent attachment.
    """

    def __init__(
        self,
        session: StatementSession,
        target_version: int = 0,
        metrics: MetricsRegistry | None = None,
    ) -> None:
        self._session = session
        self.target_version = validate_schema_version(target_version)
        self.state = GateState.UNATTACHED
        self._metrics = metrics or get_metrics()
        self._logger = get_logger(__name__, path=session.path)

    def read_version(self) -> SchemaVersion:
        """Read the persisted version.

        Returns 0 when the file does not exist or the version cannot be read.
        A missing file is not opened, since opening would create it.
        """
        if not Path(self._session.path).is_file():
            return INITIAL_SCHEMA_VERSION
        try:
            value = self._session.run(
                "PRAGMA user_version",
                lambda _conn, stmt: stmt.column_value(0) if stmt.step() else None,
            )
        except DatabaseError as exc:
            self._logger.warning("schema_version_unreadable", error=exc.message, code=exc.code)
            return INITIAL_SCHEMA_VERSION
        return SchemaVersion(int(value or 0))

    def write_version(self, version: int) -> None:
        """Persist a version.

        Raises:
            ValueError: If the version is out of range.
            DatabaseError: If the pragma fails.
        """
        version = validate_schema_version(version)
        # PRAGMA arguments cannot be bound; the value is a validated int
        self._session.run(f"PRAGMA user_version = {int(version)}", lambda _conn, stmt: stmt.step())
        self._metrics.schema_version.set(version)

    def attach(self, db: Database, observer: LifecycleObserver) -> GateState:
        """Run the full lifecycle for an observer.

        Errors from the gate, or gateway errors raised by a callback, are
        reported through ``observer.on_error`` and leave the gate FAILED.
        Other exceptions raised by callbacks propagate.

        Returns:
            The final state, READY or FAILED.
        """
        self.state = GateState.UNATTACHED
        path = Path(self._session.path)
        target = self.target_version

        try:
            if path.is_dir():
                raise OpenFailedError(f"{path} is a directory", SQLITE_CANTOPEN)

            if not path.exists():
                self._logger.info("schema_create", version=target)
                observer.on_create_database(db)
                self._metrics.schema_events_total.labels(event="create").inc()
                self.write_version(target)
                self.state = GateState.CREATED

            stored = self.read_version()
            self._logger.info("schema_version_check", stored=stored, target=target)
            if stored < target:
                observer.on_upgrade(db, stored, target)
                self._metrics.schema_events_total.labels(event="upgrade").inc()
                self.write_version(target)
                self._logger.info("schema_upgraded", old_version=stored, new_version=target)
            self.state = GateState.VERSION_CHECKED

            observer.on_open_database(db)
            self._metrics.schema_events_total.labels(event="open").inc()
            self.state = GateState.READY
        except DatabaseError as exc:
            self.state = GateState.FAILED
            self._metrics.schema_events_total.labels(event="error").inc()
            self._logger.error("schema_attach_failed", error=exc.message, code=exc.code)
            observer.on_error(db, exc)

        return self.state
