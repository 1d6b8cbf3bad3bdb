"""Fold raw annotation records into one effective constraint set."""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any

from schemacraft.annotations import AnnotationRecord
from schemacraft.nodes import (
    ArraySchema,
    ConcreteSchema,
    JsonType,
    ObjectSchema,
    PrimitiveSchema,
    SchemaNodeBase,
)

logger = logging.getLogger(__name__)

_CAMEL_ALIASES = {
    "exclusiveMinimum": "exclusive_minimum",
    "exclusiveMaximum": "exclusive_maximum",
    "multipleOf": "multiple_of",
    "minLength": "min_length",
    "maxLength": "max_length",
    "minItems": "min_items",
    "maxItems": "max_items",
    "uniqueItems": "unique_items",
    "minProperties": "min_properties",
    "maxProperties": "max_properties",
    "readOnly": "read_only",
    "writeOnly": "write_only",
    "additionalPropertiesAllowed": "additional_properties_allowed",
    "unevaluatedProperties": "unevaluated_properties",
    "requiredProperties": "required",
}

_TEXT_FIELDS = ("title", "description", "format", "pattern")
_NUMBER_FIELDS = ("minimum", "maximum", "multiple_of")
_COUNT_FIELDS = (
    "min_length",
    "max_length",
    "min_items",
    "max_items",
    "min_properties",
    "max_properties",
)
_FLAG_FIELDS = (
    "nullable",
    "read_only",
    "write_only",
    "deprecated",
    "unique_items",
    "exclusive_minimum",
    "exclusive_maximum",
    "array",
    "not_empty",
    "required_property",
)
_TRISTATE_FIELDS = ("additional_properties_allowed", "unevaluated_properties")
_PAYLOAD_FIELDS = ("default", "example", "examples")


@dataclass
class ConstraintDescriptor:
    """Merged annotation state for one declaration. ``None`` means unset."""

    title: str | None = None
    description: str | None = None
    format: str | None = None
    type: JsonType | None = None

    minimum: int | float | None = None
    maximum: int | float | None = None
    exclusive_minimum: bool = False
    exclusive_maximum: bool = False
    multiple_of: int | float | None = None

    min_length: int | None = None
    max_length: int | None = None
    pattern: str | None = None

    min_items: int | None = None
    max_items: int | None = None
    unique_items: bool = False

    min_properties: int | None = None
    max_properties: int | None = None

    nullable: bool = False
    read_only: bool = False
    write_only: bool = False
    deprecated: bool = False
    array: bool = False
    not_empty: bool = False
    required_property: bool = False
    additional_properties_allowed: bool | None = None
    unevaluated_properties: bool | None = None

    default: Any = None
    example: Any = None
    examples: list[Any] | None = None
    enum: list[Any] = field(default_factory=list)
    required: list[str] = field(default_factory=list)
    extensions: dict[str, Any] = field(default_factory=dict)

    def is_empty(self) -> bool:
        return self == ConstraintDescriptor()

    def has_object_constraints(self) -> bool:
        return (
            self.min_properties is not None
            or self.max_properties is not None
            or self.additional_properties_allowed is not None
            or self.unevaluated_properties is not None
        )


def _text(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value
    return None


def _number(value: Any) -> int | float | None:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    if isinstance(value, (str, Decimal)):
        try:
            parsed = Decimal(str(value).strip())
        except InvalidOperation:
            return None
        if not parsed.is_finite():
            return None
        if parsed == parsed.to_integral_value():
            return int(parsed)
        return float(parsed)
    return None


def _count(value: Any) -> int | None:
    number = _number(value)
    if number is None or number != int(number) or number < 0:
        return None
    return int(number)


def _flag(value: Any) -> bool:
    return value is True


def _tristate(value: Any) -> bool | None:
    return value if isinstance(value, bool) else None


def _json_type(value: Any) -> JsonType | None:
    if isinstance(value, JsonType):
        return value
    if isinstance(value, str):
        try:
            return JsonType(value.strip().lower())
        except ValueError:
            return None
    return None


def _values(value: Any) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, (str, bytes, Mapping)):
        return [value]
    if isinstance(value, Iterable):
        return list(value)
    return [value]


def _extension_key(name: str) -> str:
    return name if name.startswith("x-") else f"x-{name}"


def _append_unique(target: list[Any], values: Iterable[Any]) -> None:
    for value in values:
        if value not in target:
            target.append(value)


class AnnotationMerger:
    """Deterministic fold over an ordered list of annotation records.

    Text fields keep the last non-empty value, flags are OR-ed, numeric
    bounds keep the last explicit value (negative counts count as unset),
    enum values and required names are unioned in first-seen order, and
    default/example payloads keep the last non-null value.
    """

    def merge(self, records: Iterable[AnnotationRecord]) -> ConstraintDescriptor:
        merged = ConstraintDescriptor()
        for record in records:
            layer = self.normalize(record)
            if layer is not None:
                self._fold(merged, layer)
        return merged

    def normalize(self, record: AnnotationRecord) -> ConstraintDescriptor | None:
        """Translate one record into a partial descriptor, or ``None`` if unknown."""
        handler = getattr(self, f"_record_{record.name.lower()}", None)
        if handler is None:
            logger.debug("Ignoring unknown annotation record %r", record.name)
            return None
        layer = ConstraintDescriptor()
        handler(layer, record)
        return layer

    def _fold(self, merged: ConstraintDescriptor, layer: ConstraintDescriptor) -> None:
        for name in _TEXT_FIELDS:
            value = getattr(layer, name)
            if value:
                setattr(merged, name, value)
        if layer.type is not None:
            merged.type = layer.type
        for name in _NUMBER_FIELDS + _COUNT_FIELDS + _TRISTATE_FIELDS + _PAYLOAD_FIELDS:
            value = getattr(layer, name)
            if value is not None:
                setattr(merged, name, value)
        for name in _FLAG_FIELDS:
            if getattr(layer, name):
                setattr(merged, name, True)
        _append_unique(merged.enum, layer.enum)
        _append_unique(merged.required, layer.required)
        merged.extensions.update(layer.extensions)

    def _assign(self, layer: ConstraintDescriptor, options: Mapping[str, Any]) -> None:
        for raw_key, value in options.items():
            key = _CAMEL_ALIASES.get(raw_key, raw_key)
            if key in _TEXT_FIELDS:
                setattr(layer, key, _text(value))
            elif key in _NUMBER_FIELDS:
                setattr(layer, key, _number(value))
            elif key in _COUNT_FIELDS:
                setattr(layer, key, _count(value))
            elif key in _FLAG_FIELDS:
                setattr(layer, key, _flag(value))
            elif key in _TRISTATE_FIELDS:
                setattr(layer, key, _tristate(value))
            elif key in ("default", "example"):
                setattr(layer, key, value)
            elif key == "examples":
                layer.examples = _values(value) or None
            elif key == "type":
                layer.type = _json_type(value)
            elif key == "enum":
                layer.enum = _values(value)
            elif key == "required":
                layer.required = [name for name in _values(value) if isinstance(name, str) and name]
            elif key == "extensions" and isinstance(value, Mapping):
                layer.extensions = {_extension_key(str(k)): v for k, v in value.items()}
            else:
                logger.debug("Ignoring unsupported annotation argument %r=%r", raw_key, value)

    def _record_property(self, layer: ConstraintDescriptor, record: AnnotationRecord) -> None:
        if record.args:
            layer.description = _text(record.arg(0))
        self._assign(layer, record.kwargs)

    _record_schema = _record_property

    def _record_required(self, layer: ConstraintDescriptor, record: AnnotationRecord) -> None:
        names: list[Any] = []
        for arg in record.args:
            names.extend(_values(arg))
        names.extend(_values(record.get("names")))
        layer.required = [name for name in names if isinstance(name, str) and name]

    def _record_requiredproperty(self, layer: ConstraintDescriptor, record: AnnotationRecord) -> None:
        layer.required_property = True

    def _record_additionalproperties(self, layer: ConstraintDescriptor, record: AnnotationRecord) -> None:
        # Catch-all marker; the walker routes the property, no constraint to fold.
        return None

    def _record_range(self, layer: ConstraintDescriptor, record: AnnotationRecord) -> None:
        layer.minimum = _number(record.get("minimum", record.arg(0)))
        layer.maximum = _number(record.get("maximum", record.arg(1)))

    def _record_length(self, layer: ConstraintDescriptor, record: AnnotationRecord) -> None:
        layer.min_length = _count(record.get("min_length", record.arg(0)))
        layer.max_length = _count(record.get("max_length", record.arg(1)))

    def _record_count(self, layer: ConstraintDescriptor, record: AnnotationRecord) -> None:
        layer.min_items = _count(record.get("min_items", record.arg(0)))
        layer.max_items = _count(record.get("max_items", record.arg(1)))

    def _record_pattern(self, layer: ConstraintDescriptor, record: AnnotationRecord) -> None:
        layer.pattern = _text(record.get("pattern", record.arg(0)))

    def _record_choices(self, layer: ConstraintDescriptor, record: AnnotationRecord) -> None:
        values: list[Any] = []
        for arg in record.args:
            values.extend(_values(arg))
        layer.enum = values

    def _record_notempty(self, layer: ConstraintDescriptor, record: AnnotationRecord) -> None:
        layer.not_empty = True

    def _record_deprecated(self, layer: ConstraintDescriptor, record: AnnotationRecord) -> None:
        layer.deprecated = True

    def _record_example(self, layer: ConstraintDescriptor, record: AnnotationRecord) -> None:
        layer.example = record.get("value", record.arg(0))

    def _record_default(self, layer: ConstraintDescriptor, record: AnnotationRecord) -> None:
        layer.default = record.get("value", record.arg(0))

    def _record_description(self, layer: ConstraintDescriptor, record: AnnotationRecord) -> None:
        layer.description = _text(record.get("text", record.arg(0)))

    def _record_title(self, layer: ConstraintDescriptor, record: AnnotationRecord) -> None:
        layer.title = _text(record.get("text", record.arg(0)))

    def _record_extension(self, layer: ConstraintDescriptor, record: AnnotationRecord) -> None:
        name = record.arg(0)
        if isinstance(name, str) and name:
            layer.extensions[_extension_key(name)] = record.arg(1)
        for key, value in record.kwargs.items():
            layer.extensions[_extension_key(key)] = value

    def apply(self, descriptor: ConstraintDescriptor, node: SchemaNodeBase) -> None:
        """Write ``descriptor`` onto ``node``.

        Reference-like nodes only take title and description; everything else
        belongs on the referenced schema and is dropped here.
        """
        if not isinstance(node, ConcreteSchema):
            if descriptor.title and hasattr(node, "title"):
                node.title = descriptor.title
            if descriptor.description and hasattr(node, "description"):
                node.description = descriptor.description
            return

        if descriptor.title:
            node.title = descriptor.title
        if descriptor.description:
            node.description = descriptor.description
        if descriptor.type is not None and isinstance(node, PrimitiveSchema):
            node.type = descriptor.type
        if descriptor.nullable and not (isinstance(node, PrimitiveSchema) and node.type is None):
            node.nullable = True
        if descriptor.format:
            node.format = descriptor.format
        if descriptor.multiple_of is not None:
            node.multiple_of = descriptor.multiple_of
        if descriptor.maximum is not None:
            node.maximum = descriptor.maximum
            node.exclusive_maximum = descriptor.exclusive_maximum
        if descriptor.minimum is not None:
            node.minimum = descriptor.minimum
            node.exclusive_minimum = descriptor.exclusive_minimum

        for name in _COUNT_FIELDS:
            value = getattr(descriptor, name)
            if value is not None:
                setattr(node, name, value)
        if isinstance(node, ArraySchema):
            # Length bounds on a collection count its items.
            if node.min_length is not None:
                node.min_items = node.min_items if descriptor.min_items is not None else node.min_length
                node.min_length = None
            if node.max_length is not None:
                node.max_items = node.max_items if descriptor.max_items is not None else node.max_length
                node.max_length = None
        if descriptor.pattern:
            node.pattern = descriptor.pattern
        if descriptor.unique_items:
            node.unique_items = True
        if descriptor.not_empty:
            if isinstance(node, PrimitiveSchema) and node.type is JsonType.STRING:
                if node.min_length is None or node.min_length < 1:
                    node.min_length = 1
            elif isinstance(node, ArraySchema):
                if node.min_items is None or node.min_items < 1:
                    node.min_items = 1

        node.read_only = node.read_only or descriptor.read_only
        node.write_only = node.write_only or descriptor.write_only
        node.deprecated = node.deprecated or descriptor.deprecated
        if isinstance(node, ObjectSchema) and descriptor.additional_properties_allowed is not None:
            node.additional_properties_allowed = descriptor.additional_properties_allowed
            if descriptor.additional_properties_allowed is False:
                node.additional_properties = None
        if descriptor.unevaluated_properties is not None:
            node.unevaluated_properties = descriptor.unevaluated_properties

        if descriptor.default is not None:
            node.default = descriptor.default
        if descriptor.example is not None:
            node.example = descriptor.example
        if descriptor.examples:
            node.examples = list(descriptor.examples)
        if descriptor.enum:
            node.enum = list(descriptor.enum)
        if descriptor.required:
            _append_unique(node.required, descriptor.required)
        node.extensions.update(descriptor.extensions)

    def apply_records(self, records: Iterable[AnnotationRecord], node: SchemaNodeBase) -> ConstraintDescriptor:
        descriptor = self.merge(records)
        self.apply(descriptor, node)
        return descriptor
