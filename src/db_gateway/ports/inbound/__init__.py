"""Inbound ports - API contracts for the database gateway.

Inbound ports define the interfaces that applications use: the database
operation surface, the lifecycle observer they implement, and the errors
they handle.
"""

from db_gateway.ports.inbound.database import Args, Database, RowMapping
from db_gateway.ports.inbound.errors import (
    BindFailedError,
    DatabaseError,
    DecodeFailedError,
    OpenFailedError,
    QueryFailedError,
    UnexpectedError,
)
from db_gateway.ports.inbound.lifecycle import LifecycleObserver, NullObserver

__all__ = [
    # Database
    "Database",
    "Args",
    "RowMapping",
    # Lifecycle
    "LifecycleObserver",
    "NullObserver",
    # Errors
    "DatabaseError",
    "OpenFailedError",
    "BindFailedError",
    "QueryFailedError",
    "DecodeFailedError",
    "UnexpectedError",
]
