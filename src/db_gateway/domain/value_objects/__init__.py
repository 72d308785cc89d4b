"""Value objects for the database gateway domain.

Value objects are immutable types that represent domain concepts.
They have no identity - two value objects with the same attributes are equal.

Exports:
    Identifiers:
        - RowId, SchemaVersion: Type-safe integers
        - INITIAL_SCHEMA_VERSION: Version of a fresh file

    Parameters:
        - IntValue, RealValue, TextValue, BlobValue, NullValue, TimestampValue
        - Parameter: Union of the variants
        - to_parameter: Runtime-type conversion of plain values

    Column types:
        - StorageClass: The engine's native value kinds
        - Int8, Int16, Int32, Int64, Float32, Timestamp: Destination types

    Lifecycle:
        - GateState: Schema version gate states
"""

from db_gateway.domain.value_objects.column_types import (
    Float32,
    Int8,
    Int16,
    Int32,
    Int64,
    StorageClass,
    Timestamp,
)
from db_gateway.domain.value_objects.identifiers import (
    INITIAL_SCHEMA_VERSION,
    RowId,
    SchemaVersion,
    validate_schema_version,
)
from db_gateway.domain.value_objects.lifecycle_types import GateState
from db_gateway.domain.value_objects.parameters import (
    NULL,
    BlobValue,
    IntValue,
    NullValue,
    Parameter,
    RealValue,
    TextValue,
    TimestampValue,
    to_parameter,
)

__all__ = [
    # Identifiers
    "RowId",
    "SchemaVersion",
    "INITIAL_SCHEMA_VERSION",
    "validate_schema_version",
    # Parameters
    "Parameter",
    "IntValue",
    "RealValue",
    "TextValue",
    "BlobValue",
    "NullValue",
    "TimestampValue",
    "NULL",
    "to_parameter",
    # Column types
    "StorageClass",
    "Int8",
    "Int16",
    "Int32",
    "Int64",
    "Float32",
    "Timestamp",
    # Lifecycle
    "GateState",
]
