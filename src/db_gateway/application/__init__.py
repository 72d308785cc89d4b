"""Application layer for the database gateway.

The application layer orchestrates domain logic to fulfill use cases.
It turns each operation into one scoped statement session, run on the
serialized execution queue or on a caller-chosen executor.

Exports:
    DatabaseGateway:
        - DatabaseGateway: Main entry point for the database
    Sessions and scheduling:
        - StatementSession: open/prepare/step/finalize/close scoping
        - ExecutionQueue: Serialized worker with per-call executor override
    Schema lifecycle:
        - SchemaVersionGate: create / upgrade / open driven by user_version
"""

from db_gateway.application.database import DatabaseGateway
from db_gateway.application.execution_queue import ExecutionQueue
from db_gateway.application.schema_gate import SchemaVersionGate
from db_gateway.application.statement_session import StatementSession

__all__ = [
    "DatabaseGateway",
    "StatementSession",
    "ExecutionQueue",
    "SchemaVersionGate",
]
