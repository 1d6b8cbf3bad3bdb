"""Read Python declarations into :class:`TypeDescriptor` objects.

Supported declarations: dataclasses, pydantic models, plain annotated classes,
``Enum`` subclasses, ``typing.NewType`` brands, ``Literal``, ``Optional`` /
``X | None``, the builtin collections and their ``collections.abc``
counterparts. Property-level annotation records come from
``typing.Annotated`` metadata; ``annotated_types`` constraints and pydantic
``FieldInfo`` objects are translated into equivalent records.
"""

from __future__ import annotations

import collections.abc
import dataclasses
import inspect
import logging
import types
from enum import Enum
from typing import (
    Annotated,
    Any,
    ClassVar,
    Generic,
    Literal,
    Protocol,
    Union,
    get_args,
    get_origin,
    get_type_hints,
)

import annotated_types
from pydantic import BaseModel
from pydantic.fields import FieldInfo
from pydantic_core import PydanticUndefined

from schemacraft.annotations import (
    AnnotationRecord,
    choices,
    get_type_annotations,
    get_type_name,
    length,
    prop,
)
from schemacraft.descriptors import PropertyDescriptor, TypeDescriptor, TypeShape
from schemacraft.errors import DescribeError, Suggestion
from schemacraft.kinds import PrimitiveKind, PrimitiveTypeMapper

logger = logging.getLogger(__name__)

ROOT_BASES: frozenset[Any] = frozenset({object, BaseModel, Generic, Protocol, Enum})

_SEQUENCE_ORIGINS = {
    list,
    tuple,
    collections.abc.Sequence,
    collections.abc.MutableSequence,
    collections.abc.Iterable,
    collections.abc.Collection,
}
_SET_ORIGINS = {set, frozenset, collections.abc.Set, collections.abc.MutableSet}
_MAPPING_ORIGINS = {dict, collections.abc.Mapping, collections.abc.MutableMapping}

_LITERAL_KINDS: dict[type, PrimitiveKind] = {
    bool: PrimitiveKind.BOOLEAN,
    int: PrimitiveKind.INTEGER,
    float: PrimitiveKind.DOUBLE,
    str: PrimitiveKind.TEXT,
}


def _strip_annotated(annotation: Any) -> Any:
    value = annotation
    while get_origin(value) is Annotated:
        args = get_args(value)
        value = args[0] if args else Any
    return value


def _annotation_metadata(annotation: Any) -> tuple[Any, tuple[Any, ...]]:
    metadata: list[Any] = []
    value = annotation
    while get_origin(value) is Annotated:
        value, *extra = get_args(value)
        metadata.extend(extra)
    return value, tuple(metadata)


def _is_optional(annotation: Any) -> tuple[bool, Any]:
    origin = get_origin(annotation)
    if origin not in {Union, types.UnionType}:
        return False, annotation

    args = [arg for arg in get_args(annotation) if arg is not type(None)]
    if len(args) == len(get_args(annotation)):
        return False, annotation
    if len(args) == 1:
        return True, args[0]
    return True, Union[tuple(args)]


def constraint_records(metadata: tuple[Any, ...] | list[Any]) -> list[AnnotationRecord]:
    """Translate ``Annotated`` metadata into annotation records, in order."""
    records: list[AnnotationRecord] = []
    for item in metadata:
        if isinstance(item, AnnotationRecord):
            records.append(item)
        elif isinstance(item, FieldInfo):
            records.extend(_field_info_records(item))
        elif isinstance(item, annotated_types.Interval):
            records.extend(constraint_records(list(item)))
        elif isinstance(item, annotated_types.Ge):
            records.append(prop(minimum=item.ge))
        elif isinstance(item, annotated_types.Gt):
            records.append(prop(minimum=item.gt, exclusive_minimum=True))
        elif isinstance(item, annotated_types.Le):
            records.append(prop(maximum=item.le))
        elif isinstance(item, annotated_types.Lt):
            records.append(prop(maximum=item.lt, exclusive_maximum=True))
        elif isinstance(item, annotated_types.MultipleOf):
            records.append(prop(multiple_of=item.multiple_of))
        elif isinstance(item, annotated_types.MinLen):
            records.append(length(item.min_length, None))
        elif isinstance(item, annotated_types.MaxLen):
            records.append(length(None, item.max_length))
        elif isinstance(item, annotated_types.Len):
            records.append(length(item.min_length, item.max_length))
        else:
            logger.debug("Ignoring unsupported annotation metadata %r", item)
    return records


def _field_info_records(info: FieldInfo) -> list[AnnotationRecord]:
    records = constraint_records(info.metadata)
    fields: dict[str, Any] = {}
    if info.title:
        fields["title"] = info.title
    if info.description:
        fields["description"] = info.description
    if info.examples:
        fields["examples"] = list(info.examples)
    if info.deprecated:
        fields["deprecated"] = True
    if fields:
        records.append(prop(**fields))
    return records


def _declared_name(cls: Any) -> str:
    return get_type_name(cls) or getattr(cls, "__name__", None) or str(cls)


def _own_annotation_names(cls: type) -> list[str]:
    try:
        return list(inspect.get_annotations(cls))
    except Exception:
        return list(cls.__dict__.get("__annotations__", {}))


def _resolved_hints(cls: type) -> dict[str, Any]:
    try:
        return get_type_hints(cls, localns={cls.__name__: cls}, include_extras=True)
    except NameError as exc:
        raise DescribeError(
            f"Cannot resolve the annotations of '{cls.__qualname__}': {exc}",
            code="E2001",
            suggestion=Suggestion(
                action="declare referenced types at module level",
                fix="Forward references are resolved against the defining module's globals.",
            ),
            details={"type": cls.__qualname__},
        ) from exc


def _dataclass_defaults(cls: type) -> dict[str, Any]:
    values: dict[str, Any] = {}
    for item in dataclasses.fields(cls):
        if item.default is not dataclasses.MISSING:
            values[item.name] = item.default
        elif item.default_factory is not dataclasses.MISSING:
            values[item.name] = item.default_factory()
    return values


def _model_defaults(cls: type[BaseModel]) -> dict[str, Any]:
    values: dict[str, Any] = {}
    for field_name, info in cls.model_fields.items():
        if info.default is not PydanticUndefined:
            values[field_name] = info.default
        elif info.default_factory is not None:
            values[field_name] = info.get_default(call_default_factory=True)
    return values


class TypeDescriber:
    """Memoizing reader from Python types to type descriptors."""

    def __init__(self, mapper: PrimitiveTypeMapper | None = None) -> None:
        self.mapper = mapper or PrimitiveTypeMapper()
        self._cache: dict[Any, TypeDescriptor] = {}

    def __call__(self, token: Any) -> TypeDescriptor:
        return self.describe(token)

    def describe(self, token: Any) -> TypeDescriptor:
        if isinstance(token, TypeDescriptor):
            return token
        if token is None:
            token = type(None)
        try:
            cached = self._cache.get(token)
        except TypeError:
            return self._describe(token)
        if cached is not None:
            return cached
        descriptor = self._describe(token)
        self._cache[token] = descriptor
        return descriptor

    def _describe(self, token: Any) -> TypeDescriptor:
        tp = _strip_annotated(token)

        kind = self.mapper.kind_for(tp)
        if kind is not None:
            return TypeDescriptor(
                name=getattr(tp, "__name__", kind.value),
                shape=TypeShape.PRIMITIVE,
                kind=kind,
                source=tp,
            )

        optional, inner = _is_optional(tp)
        if optional:
            return TypeDescriptor(name=f"{_declared_name(inner)}?", shape=TypeShape.NULLABLE, inner=inner)

        origin = get_origin(tp)
        args = get_args(tp)
        if origin in {Union, types.UnionType}:
            logger.debug("Union %r has no single schema shape; emitting an untyped schema", tp)
            return TypeDescriptor(name=str(tp), shape=TypeShape.UNKNOWN)
        if origin is Literal:
            return self._describe_literal(args)
        if origin in _SEQUENCE_ORIGINS or origin in _SET_ORIGINS:
            return self._describe_sequence(tp, origin, args)
        if origin in _MAPPING_ORIGINS:
            value_type = args[1] if len(args) == 2 else Any
            return TypeDescriptor(name=f"Map[{_declared_name(value_type)}]", shape=TypeShape.MAP, inner=value_type)

        if tp in _SEQUENCE_ORIGINS or tp in _SET_ORIGINS:
            return self._describe_sequence(tp, tp, ())
        if tp in _MAPPING_ORIGINS:
            return TypeDescriptor(name="Map", shape=TypeShape.MAP, inner=Any)

        supertype = getattr(tp, "__supertype__", None)
        if supertype is not None:
            return TypeDescriptor(
                name=_declared_name(tp),
                shape=TypeShape.OBJECT,
                base=supertype,
                source=tp,
            )

        if isinstance(tp, type):
            if issubclass(tp, Enum):
                return self._describe_enum(tp)
            return self._describe_class(tp)

        logger.debug("Cannot classify %r; emitting an untyped schema", tp)
        return TypeDescriptor(name=str(tp), shape=TypeShape.UNKNOWN)

    def _describe_literal(self, values: tuple[Any, ...]) -> TypeDescriptor:
        kinds = {_LITERAL_KINDS.get(type(value)) for value in values}
        kind = kinds.pop() if len(kinds) == 1 else None
        if kind is None:
            return TypeDescriptor(name="Literal", shape=TypeShape.UNKNOWN, annotations=[choices(*values)])
        return TypeDescriptor(
            name="Literal",
            shape=TypeShape.PRIMITIVE,
            kind=kind,
            annotations=[choices(*values)],
        )

    def _describe_sequence(self, tp: Any, origin: Any, args: tuple[Any, ...]) -> TypeDescriptor:
        if origin is tuple and args:
            element_types = [arg for arg in args if arg is not Ellipsis]
            element = element_types[0] if len(set(element_types)) == 1 else Any
        else:
            element = args[0] if args else Any
        return TypeDescriptor(
            name=f"{_declared_name(element)}[]",
            shape=TypeShape.ARRAY,
            inner=element,
            unique_items=origin in _SET_ORIGINS,
            source=tp,
        )

    def _describe_enum(self, cls: type[Enum]) -> TypeDescriptor:
        return TypeDescriptor(
            name=_declared_name(cls),
            shape=TypeShape.ENUM,
            enum_members=[member.name for member in cls],
            annotations=get_type_annotations(cls),
            source=cls,
        )

    def _describe_class(self, cls: type) -> TypeDescriptor:
        base = next((b for b in cls.__bases__ if b not in ROOT_BASES), None)
        descriptor = TypeDescriptor(
            name=_declared_name(cls),
            shape=TypeShape.OBJECT,
            base=base,
            annotations=get_type_annotations(cls),
            source=cls,
        )
        if issubclass(cls, BaseModel):
            descriptor.properties = self._model_properties(cls)
            descriptor.factory = lambda: _model_defaults(cls)
        elif dataclasses.is_dataclass(cls):
            descriptor.properties = self._dataclass_properties(cls)
            descriptor.factory = lambda: _dataclass_defaults(cls)
        else:
            descriptor.properties = self._plain_properties(cls)
            descriptor.factory = cls
        return descriptor

    def _property(self, name: str, hint: Any, *, attribute: str, required: bool) -> PropertyDescriptor:
        declared, metadata = _annotation_metadata(hint)
        records = constraint_records(metadata)
        catch_all = any(record.name == "AdditionalProperties" for record in records)
        return PropertyDescriptor(
            name=name,
            declared_type=declared,
            annotations=records,
            catch_all=catch_all,
            required=required and not catch_all,
            attribute=attribute,
        )

    def _dataclass_properties(self, cls: type) -> list[PropertyDescriptor]:
        own = set(_own_annotation_names(cls))
        hints = _resolved_hints(cls)
        properties: list[PropertyDescriptor] = []
        for item in dataclasses.fields(cls):
            if item.name not in own:
                continue
            is_required = item.default is dataclasses.MISSING and item.default_factory is dataclasses.MISSING
            properties.append(
                self._property(item.name, hints.get(item.name, Any), attribute=item.name, required=is_required)
            )
        return properties

    def _model_properties(self, cls: type[BaseModel]) -> list[PropertyDescriptor]:
        own = set(_own_annotation_names(cls))
        properties: list[PropertyDescriptor] = []
        for field_name, info in cls.model_fields.items():
            if field_name not in own:
                continue
            name = info.serialization_alias or info.alias or field_name
            descriptor = self._property(
                name,
                info.annotation,
                attribute=field_name,
                required=info.is_required(),
            )
            descriptor.annotations = _field_info_records(info) + descriptor.annotations
            if any(record.name == "AdditionalProperties" for record in descriptor.annotations):
                descriptor.catch_all = True
                descriptor.required = False
            properties.append(descriptor)
        return properties

    def _plain_properties(self, cls: type) -> list[PropertyDescriptor]:
        own = _own_annotation_names(cls)
        if not own:
            return []
        hints = _resolved_hints(cls)
        properties: list[PropertyDescriptor] = []
        for name in own:
            if name.startswith("_"):
                continue
            hint = hints.get(name, Any)
            if get_origin(_strip_annotated(hint)) is ClassVar or _strip_annotated(hint) is ClassVar:
                continue
            properties.append(self._property(name, hint, attribute=name, required=False))
        return properties


def describe(token: Any) -> TypeDescriptor:
    """Describe ``token`` with a fresh describer."""
    return TypeDescriber().describe(token)
