"""Pytest configuration and fixtures for db_gateway tests."""

from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Any, Generator

import pytest
from prometheus_client import CollectorRegistry

from db_gateway.application import DatabaseGateway
from db_gateway.infrastructure.config import Config, DatabaseConfig
from db_gateway.infrastructure.metrics import MetricsRegistry
from db_gateway.ports.outbound.sql_engine import EngineError


class FakeStatement:
    """In-memory EngineStatement serving canned rows."""

    def __init__(
        self,
        columns: list[str] | None = None,
        rows: list[tuple[Any, ...]] | None = None,
        step_error: EngineError | None = None,
        bind_error: EngineError | None = None,
    ) -> None:
        self.columns = columns or []
        self.rows = list(rows or [])
        self.step_error = step_error
        self.bind_error = bind_error
        self.bindings: dict[int, Any] = {}
        self.steps = 0
        self.resets = 0
        self.finalized = 0
        self._current: tuple[Any, ...] | None = None

    def reset(self) -> None:
        self.resets += 1

    def bind(self, position: int, value: Any) -> None:
        if self.bind_error is not None:
            raise self.bind_error
        self.bindings[position] = value

    def step(self) -> bool:
        self.steps += 1
        if self.step_error is not None:
            raise self.step_error
        if not self.rows:
            self._current = None
            return False
        self._current = self.rows.pop(0)
        return True

    def column_count(self) -> int:
        return len(self.columns)

    def column_name(self, index: int) -> str:
        return self.columns[index]

    def column_value(self, index: int) -> Any:
        assert self._current is not None
        return self._current[index]

    def finalize(self) -> None:
        self.finalized += 1


class RecordingConnection:
    """EngineConnection that hands out one prepared FakeStatement."""

    def __init__(self, statement: FakeStatement, prepare_error: EngineError | None = None) -> None:
        self.statement = statement
        self.prepare_error = prepare_error
        self.prepared: list[str] = []
        self.closed = 0

    def prepare(self, sql: str) -> FakeStatement:
        if self.prepare_error is not None:
            raise self.prepare_error
        self.prepared.append(sql)
        return self.statement

    def last_insert_rowid(self) -> int:
        return 7

    def total_changes(self) -> int:
        return 3

    def close(self) -> None:
        self.closed += 1


class RecordingEngine:
    """SQLEngine that records every connection it opens."""

    def __init__(
        self,
        statement: FakeStatement | None = None,
        open_error: EngineError | None = None,
        prepare_error: EngineError | None = None,
    ) -> None:
        self.statement = statement or FakeStatement()
        self.open_error = open_error
        self.prepare_error = prepare_error
        self.connections: list[RecordingConnection] = []

    def open(self, path: str) -> RecordingConnection:
        if self.open_error is not None:
            raise self.open_error
        connection = RecordingConnection(self.statement, self.prepare_error)
        self.connections.append(connection)
        return connection


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def db_path(temp_dir: Path) -> Path:
    """Provide a database file path that does not exist yet."""
    return temp_dir / "test.db"


@pytest.fixture
def test_config(db_path: Path) -> Config:
    """Provide a test configuration pointing at a temporary file."""
    return Config(
        database=DatabaseConfig(
            path=db_path,
            schema_version=1,
            busy_timeout_seconds=1.0,
        ),
    )


@pytest.fixture
def collector_registry() -> CollectorRegistry:
    """Provide a fresh Prometheus collector registry."""
    return CollectorRegistry(auto_describe=True)


@pytest.fixture
def metrics_registry(collector_registry: CollectorRegistry) -> MetricsRegistry:
    """Provide a fresh metrics registry for each test."""
    # Use a separate registry to avoid conflicts between tests
    return MetricsRegistry(registry=collector_registry)


@pytest.fixture
def db(db_path: Path, metrics_registry: MetricsRegistry) -> Generator[DatabaseGateway, None, None]:
    """Provide a gateway on a fresh file with no observer attached."""
    with DatabaseGateway(db_path, metrics=metrics_registry) as gateway:
        yield gateway


@pytest.fixture
def fake_statement() -> type[FakeStatement]:
    """Provide the in-memory statement class."""
    return FakeStatement


@pytest.fixture
def recording_engine() -> type[RecordingEngine]:
    """Provide the recording engine class."""
    return RecordingEngine


# Markers for test categories
def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "integration: Integration tests")
