"""Type-safe integer primitives for the database gateway.

These value objects keep row ids, change counts and schema versions from
being mixed up with arbitrary integers at call sites.
"""

from __future__ import annotations

from typing import NewType


RowId = NewType("RowId", int)
"""SQLite rowid reported by last_insert_rowid()."""

SchemaVersion = NewType("SchemaVersion", int)
"""Schema version persisted in PRAGMA user_version. Never decreases."""

# Special sentinel values
INITIAL_SCHEMA_VERSION = SchemaVersion(0)
"""Version reported by a freshly created file, or one that cannot be read."""

MAX_SCHEMA_VERSION = SchemaVersion(2**63 - 1)


def validate_schema_version(version: int) -> SchemaVersion:
    """Validate and wrap a schema version.

    Raises:
        ValueError: If the version is negative or does not fit in 64 bits.
    """
    if isinstance(version, bool) or not isinstance(version, int):
        raise ValueError(f"schema version must be an integer, got {version!r}")
    if not INITIAL_SCHEMA_VERSION <= version <= MAX_SCHEMA_VERSION:
        raise ValueError(f"schema version out of range: {version}")
    return SchemaVersion(version)
