"""Outbound adapters - implementations of outbound ports.

These adapters implement external dependencies, currently the SQL engine
backed by the standard library sqlite3 module.
"""

from db_gateway.adapters.outbound.sqlite_engine import (
    SQLiteConnection,
    SQLiteEngine,
    SQLiteStatement,
)

__all__ = [
    "SQLiteEngine",
    "SQLiteConnection",
    "SQLiteStatement",
]
