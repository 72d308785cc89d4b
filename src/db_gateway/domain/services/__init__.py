"""Domain services for value marshalling.

Services implement domain logic that doesn't naturally fit within a single
entity: converting values to and from the engine's storage classes, and
projecting result rows.
"""

from db_gateway.domain.services.row_mapper import RowMapper
from db_gateway.domain.services.value_codec import ValueCodec

__all__ = [
    "RowMapper",
    "ValueCodec",
]
