"""Outbound ports - interfaces for external dependencies.

Outbound ports define contracts for external systems that the
gateway depends on: the embedded SQL engine.
"""

from db_gateway.ports.outbound.sql_engine import (
    EngineBindError,
    EngineConnection,
    EngineError,
    EngineStatement,
    SQLEngine,
)

__all__ = [
    "SQLEngine",
    "EngineConnection",
    "EngineStatement",
    "EngineError",
    "EngineBindError",
]
