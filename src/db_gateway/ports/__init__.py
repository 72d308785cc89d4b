"""Ports layer - interface definitions following Hexagonal Architecture.

Ports are abstract interfaces (protocols) that define contracts:
- Inbound ports: APIs offered to clients (Database, LifecycleObserver)
- Outbound ports: Dependencies on external systems (SQLEngine)

Adapters implement these ports with concrete functionality.
"""

from db_gateway.ports.inbound import (
    Args,
    BindFailedError,
    Database,
    DatabaseError,
    DecodeFailedError,
    LifecycleObserver,
    NullObserver,
    OpenFailedError,
    QueryFailedError,
    RowMapping,
    UnexpectedError,
)
from db_gateway.ports.outbound import (
    EngineBindError,
    EngineConnection,
    EngineError,
    EngineStatement,
    SQLEngine,
)

__all__ = [
    # Inbound ports
    "Database",
    "Args",
    "RowMapping",
    "LifecycleObserver",
    "NullObserver",
    "DatabaseError",
    "OpenFailedError",
    "BindFailedError",
    "QueryFailedError",
    "DecodeFailedError",
    "UnexpectedError",
    # Outbound ports
    "SQLEngine",
    "EngineConnection",
    "EngineStatement",
    "EngineError",
    "EngineBindError",
]
