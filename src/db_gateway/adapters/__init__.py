"""Adapters layer - concrete implementations of port interfaces.

Adapters provide the actual implementations:
- Outbound adapters: Implement external dependencies (the SQL engine)
"""

from db_gateway.adapters.outbound import SQLiteEngine

__all__ = [
    # Outbound adapters
    "SQLiteEngine",
]
