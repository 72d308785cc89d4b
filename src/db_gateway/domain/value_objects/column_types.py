"""Storage classes and destination types.

SQLite reports one storage class per column value, independent of the
column's declared type. When a value is decoded into a typed field, the
field's declared type (the destination type) drives coercion.

Fixed-width destination types are NewTypes over ``int`` and ``float``. At
runtime they are the plain Python types; the codec reads the width from the
NewType itself and truncates on narrowing.
"""

from __future__ import annotations

import datetime as dt
import types
import typing
from enum import Enum, auto
from typing import Any, NewType


class StorageClass(Enum):
    """The five native value kinds SQLite reports per column."""

    NULL = auto()
    INTEGER = auto()
    REAL = auto()
    TEXT = auto()
    BLOB = auto()

    @classmethod
    def of(cls, value: Any) -> StorageClass:
        """Classify a raw engine value.

        Raises:
            TypeError: If the value is not one the engine produces.
        """
        if value is None:
            return cls.NULL
        if isinstance(value, bool):
            return cls.INTEGER
        if isinstance(value, int):
            return cls.INTEGER
        if isinstance(value, float):
            return cls.REAL
        if isinstance(value, str):
            return cls.TEXT
        if isinstance(value, (bytes, bytearray, memoryview)):
            return cls.BLOB
        raise TypeError(f"Not an engine value: {type(value).__name__}")


Int8 = NewType("Int8", int)
"""Signed 8-bit integer destination."""

Int16 = NewType("Int16", int)
"""Signed 16-bit integer destination."""

Int32 = NewType("Int32", int)
"""Signed 32-bit integer destination."""

Int64 = NewType("Int64", int)
"""Signed 64-bit integer destination, the engine's native integer width."""

Float32 = NewType("Float32", float)
"""IEEE single precision destination."""

Timestamp = dt.datetime
"""Timestamp destination; stored as integer seconds since the epoch."""


INT_WIDTHS: dict[Any, int] = {
    Int8: 8,
    Int16: 16,
    Int32: 32,
    Int64: 64,
}

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


def wrap_signed(value: int, bits: int) -> int:
    """Truncate an integer to a signed two's-complement width.

    Example:
        >>> wrap_signed(300, 8)
        44
        >>> wrap_signed(-129, 8)
        127
    """
    mask = (1 << bits) - 1
    value &= mask
    if value >= 1 << (bits - 1):
        value -= 1 << bits
    return value


def resolve_destination(annotation: Any) -> Any:
    """Reduce a field annotation to a destination type.

    ``Optional[X]`` and ``X | None`` become ``X``. Other unions, and
    ``Any``, resolve to None (natural decoding).
    """
    if annotation is None or annotation is Any or annotation is type(None):
        return None
    origin = typing.get_origin(annotation)
    if origin is typing.Union or origin is types.UnionType:
        members = [arg for arg in typing.get_args(annotation) if arg is not type(None)]
        if len(members) == 1:
            return resolve_destination(members[0])
        return None
    return annotation
