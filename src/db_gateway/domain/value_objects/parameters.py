"""Bound parameter values.

A parameter is a closed tagged variant: exactly one of the classes below.
Callers may construct them explicitly, or pass plain Python values and let
``to_parameter`` pick the variant from the runtime type.

Each variant knows its wire value, the primitive the engine port binds.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Any, Union

from db_gateway.domain.value_objects.column_types import INT64_MAX, INT64_MIN


@dataclass(frozen=True, slots=True)
class IntValue:
    """A signed 64-bit integer parameter."""

    value: int

    def __post_init__(self) -> None:
        if not INT64_MIN <= self.value <= INT64_MAX:
            raise OverflowError(f"integer {self.value} does not fit in 64 bits")

    @property
    def wire(self) -> int:
        return int(self.value)


@dataclass(frozen=True, slots=True)
class RealValue:
    """A 64-bit float parameter."""

    value: float

    @property
    def wire(self) -> float:
        return float(self.value)


@dataclass(frozen=True, slots=True)
class TextValue:
    """A UTF-8 text parameter."""

    value: str

    @property
    def wire(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class BlobValue:
    """A byte sequence parameter. The bytes are copied at construction."""

    value: bytes

    @property
    def wire(self) -> bytes:
        return self.value


@dataclass(frozen=True, slots=True)
class NullValue:
    """SQL NULL."""

    @property
    def wire(self) -> None:
        return None


@dataclass(frozen=True, slots=True)
class TimestampValue:
    """A timestamp bound as integer seconds since the epoch.

    Naive datetimes are interpreted as local time, matching
    ``datetime.timestamp()``.
    """

    value: dt.datetime

    @property
    def wire(self) -> int:
        return int(self.value.timestamp())


Parameter = Union[IntValue, RealValue, TextValue, BlobValue, NullValue, TimestampValue]

PARAMETER_TYPES = (IntValue, RealValue, TextValue, BlobValue, NullValue, TimestampValue)

NULL = NullValue()


def to_parameter(value: Any) -> Parameter:
    """Convert a Python value to a parameter by its runtime type.

    Args:
        value: A parameter instance, None, bool, int, float, str, bytes-like,
            datetime or date.

    Returns:
        The matching parameter variant.

    Raises:
        TypeError: If the type has no binding.
        OverflowError: If an integer does not fit in 64 bits.
    """
    if isinstance(value, PARAMETER_TYPES):
        return value
    if value is None:
        return NULL
    # bool before int: bool is an int subclass
    if isinstance(value, bool):
        return IntValue(int(value))
    if isinstance(value, int):
        return IntValue(value)
    if isinstance(value, float):
        return RealValue(value)
    if isinstance(value, str):
        return TextValue(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return BlobValue(bytes(value))
    if isinstance(value, dt.datetime):
        return TimestampValue(value)
    if isinstance(value, dt.date):
        return TimestampValue(dt.datetime(value.year, value.month, value.day))
    raise TypeError(f"Unsupported parameter type: {type(value).__name__}")
