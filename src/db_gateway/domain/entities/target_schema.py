"""Typed object targets.

A target schema is the field descriptor table of a type that query rows are
decoded into: for each field, its name and declared destination type. It is
built once per type and reused for every row of every query.

Supported targets, all constructible without arguments:

- dataclasses: a default instance is created and matching fields assigned
  (frozen dataclasses are rebuilt with ``dataclasses.replace``);
- pydantic models: the row is merged over the default instance's dump and
  validated, so columns without a field are carried through to the model
  (kept only if the model allows extra fields);
- plain classes with annotated attributes: a default instance is created and
  matching attributes assigned.
"""

from __future__ import annotations

import dataclasses
import typing
from dataclasses import dataclass
from enum import Enum, auto
from functools import lru_cache
from typing import Any, Generic, TypeVar

from pydantic import BaseModel

from db_gateway.domain.value_objects.column_types import resolve_destination

T = TypeVar("T")


class TargetKind(Enum):
    """How a target type is populated."""

    DATACLASS = auto()
    """Assign fields on a default instance."""

    MODEL = auto()
    """Structural decode through pydantic validation."""

    ATTRIBUTES = auto()
    """Assign annotated attributes on a default instance."""


@dataclass(frozen=True, slots=True)
class FieldDescriptor:
    """One field of a target type.

    Attributes:
        name: Field name, matched against column names.
        declared_type: The field's annotation as declared.
        destination: The destination type the codec coerces into, or None
            for natural decoding.
    """

    name: str
    declared_type: Any
    destination: Any


class TargetSchema(Generic[T]):
    """Field descriptor table for one target type."""

    def __init__(self, target: type[T], kind: TargetKind, fields: dict[str, FieldDescriptor]) -> None:
        self.target = target
        self.kind = kind
        self.fields = fields
        self._frozen = kind is TargetKind.DATACLASS and target.__dataclass_params__.frozen

    @classmethod
    def for_type(cls, target: type[T]) -> TargetSchema[T]:
        """Return the cached schema of a target type.

        Raises:
            TypeError: If the type cannot be introspected.
        """
        return _build_schema(target)

    def destination(self, column: str) -> Any:
        """Return the destination type for a column, or None if no field matches."""
        descriptor = self.fields.get(column)
        return descriptor.destination if descriptor is not None else None

    def build(self, values: dict[str, Any]) -> T:
        """Create an instance from decoded column values.

        Raises:
            TypeError: If the target cannot be constructed without arguments.
            pydantic.ValidationError: If a model rejects the values.
        """
        if self.kind is TargetKind.MODEL:
            defaults = self.target().model_dump()
            return self.target.model_validate({**defaults, **values})

        instance = self.target()
        matching = {name: value for name, value in values.items() if name in self.fields}
        if self._frozen:
            return dataclasses.replace(instance, **matching)
        for name, value in matching.items():
            setattr(instance, name, value)
        return instance

    def __repr__(self) -> str:
        return f"TargetSchema({self.target.__name__}, {self.kind.name}, fields={list(self.fields)})"


def _descriptors(hints: dict[str, Any], names: typing.Iterable[str]) -> dict[str, FieldDescriptor]:
    return {
        name: FieldDescriptor(name, hints.get(name), resolve_destination(hints.get(name)))
        for name in names
    }


@lru_cache(maxsize=256)
def _build_schema(target: type) -> TargetSchema:
    if not isinstance(target, type):
        raise TypeError(f"target must be a class, got {target!r}")

    if issubclass(target, BaseModel):
        hints = {name: info.annotation for name, info in target.model_fields.items()}
        return TargetSchema(target, TargetKind.MODEL, _descriptors(hints, hints))

    hints = typing.get_type_hints(target)
    if dataclasses.is_dataclass(target):
        names = [f.name for f in dataclasses.fields(target)]
        return TargetSchema(target, TargetKind.DATACLASS, _descriptors(hints, names))

    names = [name for name, hint in hints.items() if typing.get_origin(hint) is not typing.ClassVar]
    return TargetSchema(target, TargetKind.ATTRIBUTES, _descriptors(hints, names))
