"""Recursive synthesis of schema nodes from a type graph."""

from __future__ import annotations

import logging
from typing import Any

from schemacraft.composition import CompositionResolver, NeedsObjectBuild
from schemacraft.defaults import ABSENT, DefaultValueCapturer
from schemacraft.describe import TypeDescriber
from schemacraft.descriptors import PropertyDescriptor, TypeDescriptor, TypeShape
from schemacraft.errors import (
    DuplicateSchemaNameError,
    SchemaDepthError,
    UnknownRequiredPropertyError,
)
from schemacraft.kinds import PrimitiveKind, PrimitiveTypeMapper, make_nullable
from schemacraft.merge import AnnotationMerger
from schemacraft.nodes import (
    ArraySchema,
    CompositionSchema,
    ConcreteSchema,
    JsonType,
    ObjectSchema,
    PrimitiveSchema,
    SchemaNode,
    SchemaRef,
    untyped,
)
from schemacraft.registry import SchemaRegistry

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 64

_INLINE_SHAPES = frozenset(
    {TypeShape.PRIMITIVE, TypeShape.NULLABLE, TypeShape.ARRAY, TypeShape.MAP, TypeShape.UNKNOWN}
)


class TypeGraphWalker:
    """Dispatch a type token to the schema node that describes it.

    ``build`` produces the node for a type; ``reference`` produces what a
    property pointing at that type should hold, which is a ``SchemaRef`` for
    every registrable type. The ``visited`` set is owned by the caller and
    spans one top-level call.
    """

    def __init__(
        self,
        registry: SchemaRegistry,
        *,
        describer: TypeDescriber | None = None,
        mapper: PrimitiveTypeMapper | None = None,
        merger: AnnotationMerger | None = None,
        capturer: DefaultValueCapturer | None = None,
        max_depth: int = DEFAULT_MAX_DEPTH,
        capture_defaults: bool = True,
    ) -> None:
        self.registry = registry
        self.mapper = mapper or PrimitiveTypeMapper()
        self.describer = describer or TypeDescriber(self.mapper)
        self.merger = merger or AnnotationMerger()
        self.capturer = capturer or DefaultValueCapturer()
        self.composition = CompositionResolver(self)
        self.max_depth = max_depth
        self.capture_defaults = capture_defaults
        self._owners: dict[str, Any] = {}
        self._depth = 0

    def descriptor(self, token: Any) -> TypeDescriptor:
        return self.describer.describe(token)

    def is_inline(self, descriptor: TypeDescriptor) -> bool:
        """True for shapes that are always emitted in place, never by name."""
        if descriptor.shape in _INLINE_SHAPES:
            return True
        return self.composition.primitive_kind(descriptor) is not None

    def build(self, token: Any, visited: set[Any]) -> SchemaNode:
        descriptor = self.descriptor(token)
        self._depth += 1
        try:
            if self._depth > self.max_depth:
                raise SchemaDepthError(descriptor.name, self.max_depth)
            return self._build(descriptor, visited)
        finally:
            self._depth -= 1

    def reference(self, token: Any, visited: set[Any]) -> SchemaNode:
        descriptor = self.descriptor(token)
        if self.is_inline(descriptor):
            return self.build(descriptor, visited)

        name = descriptor.name
        if name in self.registry:
            self._claim(name, descriptor)
            return SchemaRef(name=name)
        if descriptor.key in visited and not self.composition.publishes_array(descriptor):
            return SchemaRef(name=name)

        node = self.build(descriptor, visited)
        if self.registry.get(name) is node:
            return SchemaRef(name=name)
        return node

    def _build(self, descriptor: TypeDescriptor, visited: set[Any]) -> SchemaNode:
        shape = descriptor.shape
        if shape is TypeShape.NULLABLE:
            return make_nullable(self.reference(descriptor.inner, visited))
        if shape is TypeShape.PRIMITIVE:
            node = self.mapper.schema_for(descriptor.kind or PrimitiveKind.ANY)
            self.merger.apply_records(descriptor.annotations, node)
            return node
        if shape is TypeShape.UNKNOWN:
            node = untyped()
            self.merger.apply_records(descriptor.annotations, node)
            return node
        if shape is TypeShape.ARRAY:
            array = ArraySchema(
                items=self.reference(descriptor.inner, visited),
                unique_items=descriptor.unique_items,
            )
            self.merger.apply_records(descriptor.annotations, array)
            return array
        if shape is TypeShape.MAP:
            return self._build_map(descriptor, visited)

        shell: CompositionSchema | None = None
        if descriptor.base is not None:
            if descriptor.key in visited and self.composition.publishes_array(descriptor):
                logger.debug("Cycle at %s; emitting an empty object placeholder", descriptor.name)
                return ObjectSchema()
            outcome = self.composition.try_resolve(descriptor, visited)
            if not isinstance(outcome, NeedsObjectBuild):
                return outcome
            shell = outcome.shell

        if descriptor.key in visited:
            logger.debug("Cycle at %s; emitting an empty object placeholder", descriptor.name)
            return ObjectSchema()
        visited.add(descriptor.key)

        name = descriptor.name
        self._claim(name, descriptor)
        existing = self.registry.get(name)
        if existing is not None:
            return existing

        if shape is TypeShape.ENUM:
            node = PrimitiveSchema(type=JsonType.STRING, enum=list(descriptor.enum_members))
            self.merger.apply_records(descriptor.annotations, node)
            return self.registry.put(name, node)
        return self._build_object(descriptor, shell, visited)

    def _build_map(self, descriptor: TypeDescriptor, visited: set[Any]) -> ObjectSchema:
        value = self.descriptor(descriptor.inner if descriptor.inner is not None else Any)
        if value.shape is TypeShape.PRIMITIVE and value.kind is PrimitiveKind.ANY:
            node = ObjectSchema(additional_properties_allowed=True)
        else:
            node = ObjectSchema(additional_properties=self.reference(value, visited))
        self.merger.apply_records(descriptor.annotations, node)
        return node

    def _build_object(
        self,
        descriptor: TypeDescriptor,
        shell: CompositionSchema | None,
        visited: set[Any],
    ) -> SchemaNode:
        merged = self.merger.merge(descriptor.annotations)
        node = ObjectSchema()
        self.merger.apply(merged, node)
        self.populate_object(descriptor, node, visited)

        result: SchemaNode = node
        if shell is not None:
            shell.title, node.title = node.title, None
            shell.description, node.description = node.description, None
            shell.all_of.append(node)
            result = shell
        return self.registry.put(descriptor.name, result)

    def populate_object(
        self,
        descriptor: TypeDescriptor,
        node: ObjectSchema,
        visited: set[Any],
        *,
        required: list[str] | None = None,
    ) -> None:
        """Fill ``node`` with the own properties of ``descriptor``."""
        for name in required or []:
            if name not in node.required:
                node.required.append(name)

        for prop in descriptor.properties:
            if prop.catch_all:
                self._attach_catch_all(node, prop, visited)
                continue
            merged = self.merger.merge(prop.annotations)
            child = self.reference(prop.declared_type, visited)
            if merged.nullable and not isinstance(child, ConcreteSchema):
                child = make_nullable(child)
            self.merger.apply(merged, child)
            if self.capture_defaults and isinstance(child, ConcreteSchema) and child.default is None:
                value = self.capturer.capture(descriptor, prop)
                if value is not ABSENT:
                    child.default = value
            node.properties[prop.name] = child
            if (prop.required or merged.required_property) and prop.name not in node.required:
                node.required.append(prop.name)

        self._validate_required(descriptor, node)

    def _attach_catch_all(self, node: ObjectSchema, prop: PropertyDescriptor, visited: set[Any]) -> None:
        merged = self.merger.merge(prop.annotations)
        value = self.reference(prop.declared_type, visited)
        if isinstance(value, ObjectSchema) and not value.properties:
            if value.additional_properties is not None:
                value = value.additional_properties
            elif value.additional_properties_allowed:
                node.additional_properties_allowed = True
                if merged.title or merged.description:
                    logger.debug("Catch-all %s accepts any value; its annotations have no target", prop.name)
                return
        self.merger.apply(merged, value)
        node.additional_properties = value

    def _validate_required(self, descriptor: TypeDescriptor, node: ObjectSchema) -> None:
        known = set(node.properties)
        for base in self.composition.base_chain(descriptor):
            if base.shape is TypeShape.OBJECT:
                known.update(base.property_names())
        missing = [name for name in node.required if name not in known]
        if missing:
            raise UnknownRequiredPropertyError(descriptor.name, missing)

    def _claim(self, name: str, descriptor: TypeDescriptor) -> None:
        owner = self._owners.setdefault(name, descriptor.key)
        if owner is not descriptor.key and owner != descriptor.key:
            raise DuplicateSchemaNameError(name, _describe_owner(owner), descriptor.qualified_name)

    def prune_claims(self) -> None:
        """Forget name claims whose schema never made it into the registry."""
        self._owners = {name: key for name, key in self._owners.items() if name in self.registry}


def _describe_owner(key: Any) -> str:
    if isinstance(key, TypeDescriptor):
        return key.qualified_name
    module = getattr(key, "__module__", None)
    qualname = getattr(key, "__qualname__", None)
    if module and qualname:
        return f"{module}.{qualname}"
    return repr(key)
