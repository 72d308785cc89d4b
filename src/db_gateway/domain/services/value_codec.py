"""Value codec: host values to bound parameters and back.

Binding converts a Python value to a Parameter variant and binds its wire
value at a position. Decoding turns a raw engine value into a Python value,
optionally coerced to a destination type.

Coercion table (storage class -> destination):

    NULL     any          -> None
    BLOB     any          -> bytes (no coercion path)
    INTEGER  int          -> int
    REAL     int          -> truncated toward zero
    numeric  Int8..Int64  -> two's-complement truncation, no overflow guard
    numeric  float        -> float
    numeric  Float32      -> rounded through IEEE single precision
    numeric  bool         -> value == 1
    numeric  str          -> str(value)
    numeric  datetime     -> epoch seconds, UTC
    TEXT     str          -> verbatim
    TEXT     numeric      -> parsed ("42" -> 42, "2.5" -> 2 for int)
    TEXT     bool         -> true/false/yes/no/1/0, case-insensitive
    TEXT     datetime     -> numeric text parsed as epoch seconds
    TEXT     bytes        -> UTF-8 encoded

Malformed text raises ValueError. The codec has no error type of its own
for coercion; callers that decode typed rows turn these into
DecodeFailedError.
"""

from __future__ import annotations

import datetime as dt
import math
import struct
from typing import Any, Iterable

from db_gateway.domain.value_objects.column_types import (
    INT_WIDTHS,
    Float32,
    StorageClass,
    resolve_destination,
    wrap_signed,
)
from db_gateway.domain.value_objects.parameters import to_parameter
from db_gateway.ports.inbound.errors import BindFailedError
from db_gateway.ports.outbound.sql_engine import (
    SQLITE_MISMATCH,
    SQLITE_RANGE,
    EngineError,
    EngineStatement,
)

_TRUE_STRINGS = frozenset({"true", "yes", "1"})
_FALSE_STRINGS = frozenset({"false", "no", "0"})


def _narrow_float32(value: float) -> float:
    try:
        return struct.unpack("<f", struct.pack("<f", value))[0]
    except OverflowError:
        return math.copysign(math.inf, value)


def _parse_int(text: str) -> int:
    stripped = text.strip()
    try:
        return int(stripped)
    except ValueError:
        return int(float(stripped))


def _parse_bool(text: str) -> bool:
    lowered = text.strip().lower()
    if lowered in _TRUE_STRINGS:
        return True
    if lowered in _FALSE_STRINGS:
        return False
    raise ValueError(f"not a boolean string: {text!r}")


def _from_epoch(seconds: float) -> dt.datetime:
    return dt.datetime.fromtimestamp(seconds, tz=dt.timezone.utc)


class ValueCodec:
    """Converts values between Python and the engine's storage classes.

    The codec is stateless and safe to share between threads.
    """

    def bind(self, statement: EngineStatement, argument: Any, position: int) -> None:
        """Bind one argument.

        Args:
            statement: The prepared statement.
            argument: A Parameter variant or a plain Python value.
            position: 0-based argument position.

        Raises:
            BindFailedError: If the argument has no binding or the engine
                rejects it.
        """
        try:
            wire = to_parameter(argument).wire
        except TypeError as exc:
            raise BindFailedError(str(exc), SQLITE_MISMATCH) from exc
        except (OverflowError, OSError, ValueError) as exc:
            raise BindFailedError(str(exc), SQLITE_RANGE) from exc

        try:
            statement.bind(position + 1, wire)
        except EngineError as exc:
            raise BindFailedError(exc.message, exc.code) from exc

    def bind_all(self, statement: EngineStatement, arguments: Iterable[Any] | None) -> None:
        """Bind arguments in order. Stops at the first failure."""
        if arguments is None:
            return
        for position, argument in enumerate(arguments):
            self.bind(statement, argument, position)

    def decode(self, value: Any, destination: Any = None) -> Any:
        """Decode a raw engine value.

        Args:
            value: Value as reported by the engine.
            destination: Optional destination type (see module docstring).

        Returns:
            The decoded value.

        Raises:
            ValueError: If text cannot be parsed as the destination type.
        """
        storage = StorageClass.of(value)
        if storage is StorageClass.NULL:
            return None
        if storage is StorageClass.BLOB:
            return bytes(value)

        destination = resolve_destination(destination)
        if destination is None:
            return value
        if storage is StorageClass.TEXT:
            return self._from_text(value, destination)
        return self._from_number(value, destination)

    def _from_number(self, value: int | float, destination: Any) -> Any:
        bits = INT_WIDTHS.get(destination)
        if bits is not None:
            return wrap_signed(int(value), bits)
        if destination is bool:
            return value == 1
        if destination is int:
            return int(value)
        if destination is Float32:
            return _narrow_float32(float(value))
        if destination is float:
            return float(value)
        if destination is str:
            return str(value)
        if destination is dt.datetime:
            return _from_epoch(value)
        if destination is bytes:
            return str(value).encode("utf-8")
        return value

    def _from_text(self, text: str, destination: Any) -> Any:
        if destination is str:
            return text
        bits = INT_WIDTHS.get(destination)
        if bits is not None:
            return wrap_signed(_parse_int(text), bits)
        if destination is bool:
            return _parse_bool(text)
        if destination is int:
            return _parse_int(text)
        if destination is Float32:
            return _narrow_float32(float(text))
        if destination is float:
            return float(text)
        if destination is dt.datetime:
            return _from_epoch(float(text))
        if destination is bytes:
            return text.encode("utf-8")
        return text
