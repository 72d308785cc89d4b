"""Integration tests for the schema lifecycle."""

from __future__ import annotations

import sqlite3
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest
from prometheus_client import CollectorRegistry

from db_gateway import (
    DatabaseGateway,
    GateState,
    NullObserver,
    OpenFailedError,
    QueryFailedError,
)
from db_gateway.infrastructure.metrics import MetricsRegistry


def persisted_version(path: Path) -> int:
    conn = sqlite3.connect(path)
    try:
        return conn.execute("PRAGMA user_version").fetchone()[0]
    finally:
        conn.close()


def prepare_file(path: Path, version: int) -> None:
    conn = sqlite3.connect(path)
    try:
        conn.execute(f"PRAGMA user_version = {version}")
    finally:
        conn.close()


class TableObserver(NullObserver):
    """Creates the schema on create and records upgrades."""

    def __init__(self) -> None:
        self.upgrades: list[tuple[int, int]] = []
        self.opened = 0

    def on_create_database(self, db: Any) -> None:
        db.exec_sync("CREATE TABLE items (id INTEGER PRIMARY KEY, name TEXT)")
        # Deferred calls from a callback run inline on the worker
        db.exec("CREATE INDEX items_name ON items (name)").result(timeout=5)

    def on_upgrade(self, db: Any, old_version: int, new_version: int) -> None:
        self.upgrades.append((old_version, new_version))

    def on_open_database(self, db: Any) -> None:
        self.opened += 1


class SlowTableObserver(TableObserver):
    """Takes a while to create the schema."""

    def on_create_database(self, db: Any) -> None:
        time.sleep(0.05)
        super().on_create_database(db)


@pytest.fixture
def gateway_factory(metrics_registry: MetricsRegistry) -> Any:
    """Build gateways that are closed after the test."""
    created: list[DatabaseGateway] = []

    def factory(path: Path, version: int) -> DatabaseGateway:
        db = DatabaseGateway(path, version, metrics=metrics_registry)
        created.append(db)
        return db

    yield factory
    for db in created:
        db.close()


@pytest.mark.integration
class TestSchemaCreation:
    """Tests for fresh files."""

    def test_fresh_file_creates_at_target(self, db_path: Path, gateway_factory: Any) -> None:
        db = gateway_factory(db_path, 3)
        observer = MagicMock()

        state = db.attach_sync(observer)

        assert state is GateState.READY
        assert state.is_terminal()
        observer.on_create_database.assert_called_once_with(db)
        observer.on_upgrade.assert_not_called()
        observer.on_open_database.assert_called_once_with(db)
        observer.on_error.assert_not_called()
        assert persisted_version(db_path) == 3
        assert db.schema_version() == 3

    def test_callbacks_run_in_order(self, db_path: Path, gateway_factory: Any) -> None:
        db = gateway_factory(db_path, 1)
        observer = MagicMock()

        db.attach_sync(observer)

        assert [c[0] for c in observer.method_calls] == ["on_create_database", "on_open_database"]

    def test_create_callback_uses_database(self, db_path: Path, gateway_factory: Any) -> None:
        db = gateway_factory(db_path, 1)
        observer = TableObserver()

        assert db.attach_sync(observer) is GateState.READY
        assert db.insert_sync("INSERT INTO items (name) VALUES (?)", ["a"]) == 1
        assert observer.opened == 1

    def test_queued_operations_wait_for_attachment(
        self, db_path: Path, metrics_registry: MetricsRegistry
    ) -> None:
        """Operations queued after construction see the created schema."""
        with DatabaseGateway(db_path, 1, TableObserver(), metrics=metrics_registry) as db:
            row_id = db.insert("INSERT INTO items (name) VALUES (?)", ["first"]).result(timeout=5)

        assert row_id == 1

    def test_sync_operations_wait_for_attachment(
        self, db_path: Path, metrics_registry: MetricsRegistry
    ) -> None:
        """Synchronous calls right after construction see the created schema."""
        observer = SlowTableObserver()
        with DatabaseGateway(db_path, 1, observer, metrics=metrics_registry) as db:
            row_id = db.insert_sync("INSERT INTO items (name) VALUES (?)", ["first"])
            assert db.gate_state is GateState.READY

        assert row_id == 1
        assert observer.upgrades == []

    def test_executor_operations_wait_for_attachment(
        self, db_path: Path, metrics_registry: MetricsRegistry
    ) -> None:
        observer = SlowTableObserver()
        with ThreadPoolExecutor(max_workers=2) as pool:
            with DatabaseGateway(db_path, 1, observer, metrics=metrics_registry) as db:
                future = db.insert("INSERT INTO items (name) VALUES (?)", ["first"], executor=pool)
                assert future.result(timeout=5) == 1

        assert observer.upgrades == []

    def test_fresh_files_always_run_create(
        self, temp_dir: Path, metrics_registry: MetricsRegistry
    ) -> None:
        for i in range(50):
            observer = MagicMock()
            with DatabaseGateway(
                temp_dir / f"fresh_{i}.db", 1, observer, metrics=metrics_registry
            ) as db:
                db.exec_sync("SELECT 1")

            observer.on_create_database.assert_called_once_with(db)
            observer.on_upgrade.assert_not_called()
            assert persisted_version(temp_dir / f"fresh_{i}.db") == 1

    def test_schema_version_does_not_create_file(self, db_path: Path, gateway_factory: Any) -> None:
        db = gateway_factory(db_path, 2)

        assert db.schema_version() == 0
        assert not db_path.exists()
        assert db.gate_state is GateState.UNATTACHED


@pytest.mark.integration
class TestSchemaUpgrade:
    """Tests for existing files."""

    def test_upgrade_from_older_version(self, db_path: Path, gateway_factory: Any) -> None:
        prepare_file(db_path, 1)
        db = gateway_factory(db_path, 3)
        observer = MagicMock()

        db.attach_sync(observer)

        observer.on_create_database.assert_not_called()
        observer.on_upgrade.assert_called_once_with(db, 1, 3)
        observer.on_open_database.assert_called_once_with(db)
        assert persisted_version(db_path) == 3

    def test_newer_file_is_not_downgraded(self, db_path: Path, gateway_factory: Any) -> None:
        prepare_file(db_path, 5)
        db = gateway_factory(db_path, 3)
        observer = MagicMock()

        db.attach_sync(observer)

        observer.on_upgrade.assert_not_called()
        observer.on_open_database.assert_called_once()
        assert persisted_version(db_path) == 5

    def test_reattach_is_idempotent(self, db_path: Path, gateway_factory: Any) -> None:
        """Only the open callback repeats for an unchanged target."""
        db = gateway_factory(db_path, 2)
        observer = MagicMock()

        db.attach_sync(observer)
        db.attach_sync(observer)

        assert observer.on_create_database.call_count == 1
        assert observer.on_upgrade.call_count == 0
        assert observer.on_open_database.call_count == 2

    def test_new_target_on_existing_file(self, db_path: Path, gateway_factory: Any) -> None:
        first = TableObserver()
        gateway_factory(db_path, 1).attach_sync(first)
        second = TableObserver()

        gateway_factory(db_path, 2).attach_sync(second)

        assert first.upgrades == []
        assert second.upgrades == [(1, 2)]


@pytest.mark.integration
class TestSchemaFailures:
    """Tests for errors during attachment."""

    def test_directory_path_reports_error(self, temp_dir: Path, gateway_factory: Any) -> None:
        db = gateway_factory(temp_dir, 1)
        observer = MagicMock()

        state = db.attach_sync(observer)

        assert state is GateState.FAILED
        observer.on_create_database.assert_not_called()
        observer.on_open_database.assert_not_called()
        observer.on_error.assert_called_once()
        error = observer.on_error.call_args.args[1]
        assert isinstance(error, OpenFailedError)

    def test_directory_path_does_not_raise_from_constructor(
        self, temp_dir: Path, metrics_registry: MetricsRegistry
    ) -> None:
        observer = MagicMock()

        with DatabaseGateway(temp_dir, 1, observer, metrics=metrics_registry):
            pass

        observer.on_error.assert_called_once()

    def test_failing_callback_is_reported(self, db_path: Path, gateway_factory: Any) -> None:
        db = gateway_factory(db_path, 1)
        observer = MagicMock()
        observer.on_create_database.side_effect = lambda d: d.exec_sync("CREATE TABLE (")

        state = db.attach_sync(observer)

        assert state is GateState.FAILED
        observer.on_open_database.assert_not_called()
        error = observer.on_error.call_args.args[1]
        assert isinstance(error, (OpenFailedError, QueryFailedError))

    def test_other_callback_exceptions_propagate(self, db_path: Path, gateway_factory: Any) -> None:
        db = gateway_factory(db_path, 1)
        observer = MagicMock()
        observer.on_open_database.side_effect = KeyError("boom")

        with pytest.raises(KeyError):
            db.attach_sync(observer)

        observer.on_error.assert_not_called()
        assert db.gate_state is GateState.VERSION_CHECKED

    def test_schema_metrics(
        self, db_path: Path, gateway_factory: Any, collector_registry: CollectorRegistry
    ) -> None:
        gateway_factory(db_path, 4).attach_sync(MagicMock())

        sample = collector_registry.get_sample_value
        assert sample("db_gateway_schema_events_total", {"event": "create"}) == 1.0
        assert sample("db_gateway_schema_events_total", {"event": "open"}) == 1.0
        assert sample("db_gateway_schema_version") == 4.0
