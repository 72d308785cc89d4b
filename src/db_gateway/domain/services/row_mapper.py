"""Row mapper: result rows to mappings, typed objects and scalars.

Rows are consumed by stepping the statement. Generic rows decode every
column in its natural storage class. Typed rows decode each column with the
declared type of the same-named field of the target schema.

A typed decode failure aborts the query: rows decoded before the failure are
dropped and DecodeFailedError is raised. Callers never see a partial list.
"""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import ValidationError

from db_gateway.domain.entities.target_schema import TargetSchema
from db_gateway.domain.services.value_codec import ValueCodec
from db_gateway.ports.inbound.errors import DecodeFailedError
from db_gateway.ports.outbound.sql_engine import EngineStatement

T = TypeVar("T")

# Coercion and construction errors that abort a typed query
DECODE_ERRORS = (ValueError, TypeError, OverflowError, OSError, ValidationError)


class RowMapper:
    """Projects result rows through a value codec."""

    def __init__(self, codec: ValueCodec | None = None) -> None:
        self._codec = codec or ValueCodec()

    @property
    def codec(self) -> ValueCodec:
        return self._codec

    def schema_for(self, target: type[T]) -> TargetSchema[T]:
        """Introspect a target type.

        Raises:
            DecodeFailedError: If the type cannot serve as a target.
        """
        try:
            return TargetSchema.for_type(target)
        except (TypeError, NameError) as exc:
            raise DecodeFailedError(exc) from exc

    def map_row(self, statement: EngineStatement) -> dict[str, Any]:
        """Decode the current row into a column-name mapping.

        Duplicate column names keep the last column's value.
        """
        row: dict[str, Any] = {}
        for index in range(statement.column_count()):
            row[statement.column_name(index)] = self._codec.decode(statement.column_value(index))
        return row

    def map_object(self, statement: EngineStatement, schema: TargetSchema[T]) -> T:
        """Decode the current row into an instance of the schema's target.

        Raises:
            DecodeFailedError: If a column cannot be coerced or the object
                cannot be built.
        """
        values: dict[str, Any] = {}
        try:
            for index in range(statement.column_count()):
                name = statement.column_name(index)
                values[name] = self._codec.decode(
                    statement.column_value(index), schema.destination(name)
                )
            return schema.build(values)
        except DECODE_ERRORS as exc:
            raise DecodeFailedError(exc) from exc

    def collect(
        self,
        statement: EngineStatement,
        schema: TargetSchema[T] | None = None,
        limit: int | None = None,
    ) -> list[Any]:
        """Step the statement and map rows until done or ``limit`` is reached."""
        rows: list[Any] = []
        while (limit is None or len(rows) < limit) and statement.step():
            if schema is None:
                rows.append(self.map_row(statement))
            else:
                rows.append(self.map_object(statement, schema))
        return rows

    def scalar(self, statement: EngineStatement, destination: type, default: Any = None) -> Any:
        """Read column 0 of the first row.

        Returns ``default`` if the statement produces no row or the value is
        NULL.

        Raises:
            DecodeFailedError: If the value cannot be coerced to ``destination``.
        """
        if not statement.step():
            return default
        value = statement.column_value(0)
        if value is None:
            return default
        try:
            return self._codec.decode(value, destination)
        except DECODE_ERRORS as exc:
            raise DecodeFailedError(exc) from exc
