"""Explicit type descriptors consumed by the synthesis engine.

A descriptor is the engine's whole view of a declared type: its shape, its own
properties, its annotation records and how to obtain default values. Hosts can
build descriptors by hand or let :mod:`schemacraft.describe` read them off
Python classes.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from schemacraft.annotations import AnnotationRecord
from schemacraft.kinds import PrimitiveKind


class TypeShape(str, Enum):
    PRIMITIVE = "primitive"
    NULLABLE = "nullable"
    ENUM = "enum"
    ARRAY = "array"
    MAP = "map"
    OBJECT = "object"
    UNKNOWN = "unknown"


@dataclass
class PropertyDescriptor:
    """One own property of an object type.

    ``declared_type`` is any type token the engine's resolver understands: a
    Python type or another descriptor.
    """

    name: str
    declared_type: Any
    annotations: list[AnnotationRecord] = field(default_factory=list)
    catch_all: bool = False
    required: bool = False
    attribute: str | None = None

    @property
    def attribute_name(self) -> str:
        return self.attribute or self.name


@dataclass(eq=False)
class TypeDescriptor:
    """Shape and metadata for one declared type.

    ``inner`` holds the wrapped type for NULLABLE, the element type for ARRAY
    and the value type for MAP. ``factory`` returns an instance (or a mapping
    of property name to value) used to read declared defaults.
    """

    name: str
    shape: TypeShape
    kind: PrimitiveKind | None = None
    inner: Any = None
    base: Any = None
    enum_members: list[str] = field(default_factory=list)
    properties: list[PropertyDescriptor] = field(default_factory=list)
    annotations: list[AnnotationRecord] = field(default_factory=list)
    factory: Callable[[], Any] | None = None
    source: Any = None
    unique_items: bool = False

    @property
    def key(self) -> Any:
        """Identity used by the cycle guard."""
        return self.source if self.source is not None else self

    @property
    def qualified_name(self) -> str:
        source = self.source
        module = getattr(source, "__module__", None)
        qualname = getattr(source, "__qualname__", None)
        if module and qualname:
            return f"{module}.{qualname}"
        return self.name

    def property_names(self) -> list[str]:
        return [p.name for p in self.properties if not p.catch_all]


def primitive(kind: PrimitiveKind, name: str | None = None) -> TypeDescriptor:
    return TypeDescriptor(name=name or kind.value, shape=TypeShape.PRIMITIVE, kind=kind)


def nullable(inner: Any) -> TypeDescriptor:
    return TypeDescriptor(name=f"{_token_name(inner)}?", shape=TypeShape.NULLABLE, inner=inner)


def array_of(element: Any, *, unique: bool = False) -> TypeDescriptor:
    return TypeDescriptor(
        name=f"{_token_name(element)}[]",
        shape=TypeShape.ARRAY,
        inner=element,
        unique_items=unique,
    )


def map_of(value: Any) -> TypeDescriptor:
    return TypeDescriptor(name=f"Map[{_token_name(value)}]", shape=TypeShape.MAP, inner=value)


def _token_name(token: Any) -> str:
    if isinstance(token, TypeDescriptor):
        return token.name
    return getattr(token, "__name__", None) or str(token)
