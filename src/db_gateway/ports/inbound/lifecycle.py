"""Lifecycle observer port.

A lifecycle observer is notified while the schema version gate attaches it
to a database. All callbacks run synchronously on the database's serialized
worker, in this order: create (fresh file only), upgrade (stored version
below target only), open (always). Errors halt the sequence and are reported
through ``on_error``.

Callbacks may use the database's synchronous operations, or its deferred
operations; deferred calls made from inside a callback run inline.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from db_gateway.ports.inbound.database import Database
    from db_gateway.ports.inbound.errors import DatabaseError


class LifecycleObserver(Protocol):
    """Protocol for schema lifecycle callbacks."""

    @abstractmethod
    def on_create_database(self, db: Database) -> None:
        """Called once when the database file did not exist.

        Typically creates the tables of the current schema. The target
        version is persisted after this returns.
        """
        ...

    @abstractmethod
    def on_upgrade(self, db: Database, old_version: int, new_version: int) -> None:
        """Called when the persisted version is below the target version."""
        ...

    @abstractmethod
    def on_open_database(self, db: Database) -> None:
        """Called once per attachment after the version check."""
        ...

    @abstractmethod
    def on_error(self, db: Database, error: DatabaseError) -> None:
        """Called when attachment cannot proceed."""
        ...


class NullObserver:
    """Observer that ignores every event.

    Subclass it to implement only the callbacks you need.
    """

    def on_create_database(self, db: Database) -> None:
        pass

    def on_upgrade(self, db: Database, old_version: int, new_version: int) -> None:
        pass

    def on_open_database(self, db: Database) -> None:
        pass

    def on_error(self, db: Database, error: DatabaseError) -> None:
        pass
