"""Domain entities for the database gateway.

Exports:
    Target schemas:
        - TargetSchema: Field descriptor table of a typed row target
        - FieldDescriptor: Name and destination type of one field
        - TargetKind: How the target is populated
"""

from db_gateway.domain.entities.target_schema import (
    FieldDescriptor,
    TargetKind,
    TargetSchema,
)

__all__ = [
    "TargetSchema",
    "FieldDescriptor",
    "TargetKind",
]
