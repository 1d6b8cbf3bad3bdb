"""Declarative annotation records for types and properties.

Records are plain data: a name plus literal positional and named arguments.
They are attached to classes with :func:`schema_component` and to properties
through ``typing.Annotated`` metadata, then folded by
:class:`schemacraft.merge.AnnotationMerger`.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, TypeVar

T = TypeVar("T")

TYPE_ANNOTATIONS_ATTR = "__schemacraft_annotations__"
TYPE_NAME_ATTR = "__schemacraft_name__"


@dataclass(frozen=True)
class AnnotationRecord:
    """One raw annotation attached to a type or property."""

    name: str
    args: tuple[Any, ...] = ()
    kwargs: Mapping[str, Any] = field(default_factory=dict)

    def get(self, key: str, default: Any = None) -> Any:
        return self.kwargs.get(key, default)

    def arg(self, index: int, default: Any = None) -> Any:
        if index < len(self.args):
            return self.args[index]
        return default


def prop(**kwargs: Any) -> AnnotationRecord:
    """Property-level constraint group (title, description, min_length, ...)."""
    return AnnotationRecord("Property", (), kwargs)


def required(*names: str) -> AnnotationRecord:
    """Type-level list of required property names."""
    return AnnotationRecord("Required", tuple(names))


def value_range(minimum: Any = None, maximum: Any = None) -> AnnotationRecord:
    return AnnotationRecord("Range", (minimum, maximum))


def length(min_length: int | None = None, max_length: int | None = None) -> AnnotationRecord:
    return AnnotationRecord("Length", (min_length, max_length))


def count(min_items: int | None = None, max_items: int | None = None) -> AnnotationRecord:
    return AnnotationRecord("Count", (min_items, max_items))


def pattern(regex: str) -> AnnotationRecord:
    return AnnotationRecord("Pattern", (regex,))


def choices(*values: Any) -> AnnotationRecord:
    return AnnotationRecord("Choices", tuple(values))


def example(value: Any) -> AnnotationRecord:
    return AnnotationRecord("Example", (value,))


def default(value: Any) -> AnnotationRecord:
    return AnnotationRecord("Default", (value,))


def description(text: str) -> AnnotationRecord:
    return AnnotationRecord("Description", (text,))


def title(text: str) -> AnnotationRecord:
    return AnnotationRecord("Title", (text,))


def extension(name: str, value: Any) -> AnnotationRecord:
    """Vendor extension; the ``x-`` prefix is added when missing."""
    return AnnotationRecord("Extension", (name, value))


RequiredProperty = AnnotationRecord("RequiredProperty")
AdditionalProperties = AnnotationRecord("AdditionalProperties")
NotEmpty = AnnotationRecord("NotEmpty")
Deprecated = AnnotationRecord("Deprecated")
AsArray = AnnotationRecord("Property", (), {"array": True})


def schema_component(
    *records: AnnotationRecord,
    name: str | None = None,
    **kwargs: Any,
) -> Callable[[type[T]], type[T]]:
    """Attach type-level annotation records to a class.

    Keyword arguments become a single ``Schema`` record. Stacked decorators
    keep their top-to-bottom reading order.
    """

    def decorator(cls: type[T]) -> type[T]:
        own = list(cls.__dict__.get(TYPE_ANNOTATIONS_ATTR, []))
        added = list(records)
        if kwargs:
            added.append(AnnotationRecord("Schema", (), dict(kwargs)))
        setattr(cls, TYPE_ANNOTATIONS_ATTR, added + own)
        if name is not None:
            setattr(cls, TYPE_NAME_ATTR, name)
        return cls

    return decorator


def get_type_annotations(cls: Any) -> list[AnnotationRecord]:
    """Return the records declared on ``cls`` itself, never inherited ones."""
    namespace = getattr(cls, "__dict__", None)
    if not isinstance(namespace, Mapping):
        return []
    records = namespace.get(TYPE_ANNOTATIONS_ATTR)
    if not records:
        return []
    return [record for record in records if isinstance(record, AnnotationRecord)]


def get_type_name(cls: Any) -> str | None:
    namespace = getattr(cls, "__dict__", None)
    if not isinstance(namespace, Mapping):
        return None
    value = namespace.get(TYPE_NAME_ATTR)
    return value if isinstance(value, str) and value else None
