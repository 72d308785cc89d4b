"""
Database Gateway - typed access to SQLite database files

Runs single SQL statements against a database file with bound parameters,
decodes result rows into mappings, scalars or typed objects, serializes
work on a background queue and manages schema versions through a lifecycle
observer.
"""

__version__ = "0.1.0"
__author__ = "Systems Engineering Portfolio"

from db_gateway.application import DatabaseGateway
from db_gateway.domain.value_objects import (
    NULL,
    BlobValue,
    Float32,
    GateState,
    Int8,
    Int16,
    Int32,
    Int64,
    IntValue,
    NullValue,
    RealValue,
    RowId,
    SchemaVersion,
    TextValue,
    Timestamp,
    TimestampValue,
)
from db_gateway.ports.inbound import (
    BindFailedError,
    Database,
    DatabaseError,
    DecodeFailedError,
    LifecycleObserver,
    NullObserver,
    OpenFailedError,
    QueryFailedError,
    UnexpectedError,
)

__all__ = [
    "DatabaseGateway",
    "Database",
    "LifecycleObserver",
    "NullObserver",
    "GateState",
    "RowId",
    "SchemaVersion",
    # Parameters
    "IntValue",
    "RealValue",
    "TextValue",
    "BlobValue",
    "NullValue",
    "TimestampValue",
    "NULL",
    # Destination types
    "Int8",
    "Int16",
    "Int32",
    "Int64",
    "Float32",
    "Timestamp",
    # Errors
    "DatabaseError",
    "OpenFailedError",
    "BindFailedError",
    "QueryFailedError",
    "DecodeFailedError",
    "UnexpectedError",
]
