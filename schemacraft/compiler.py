"""Public entry points for compiling declared types into component schemas."""

from __future__ import annotations

import logging
from typing import Any

from schemacraft.config import SchemacraftConfig
from schemacraft.describe import TypeDescriber
from schemacraft.descriptors import TypeShape
from schemacraft.kinds import PrimitiveKind, PrimitiveTypeMapper, make_nullable
from schemacraft.nodes import (
    ArraySchema,
    JsonType,
    ObjectSchema,
    PrimitiveSchema,
    SchemaNode,
    SchemaRef,
)
from schemacraft.registry import SchemaRegistry
from schemacraft.walker import TypeGraphWalker

logger = logging.getLogger(__name__)


class SchemaCompiler:
    """Compile types into a shared :class:`SchemaRegistry`.

    Example::

        compiler = SchemaCompiler()
        ref = compiler.ensure_schema(Order)
        document = compiler.components()
    """

    def __init__(
        self,
        registry: SchemaRegistry | None = None,
        *,
        config: SchemacraftConfig | None = None,
        describer: TypeDescriber | None = None,
        mapper: PrimitiveTypeMapper | None = None,
    ) -> None:
        self.config = config or SchemacraftConfig(load=False)
        self.openapi_version = self.config.openapi_version
        self.registry = registry if registry is not None else SchemaRegistry()
        self.walker = TypeGraphWalker(
            self.registry,
            describer=describer,
            mapper=mapper,
            max_depth=self.config.max_depth,
            capture_defaults=self.config.capture_defaults,
        )

    def ensure_schema(self, tp: Any) -> SchemaNode:
        """Register ``tp`` (and everything it reaches) and return how to point at it.

        Registrable types yield a ``SchemaRef``; primitives, arrays, maps and
        aliases yield their inline node. A configuration error rolls back every
        schema written during this call.
        """
        descriptor = self.walker.descriptor(tp)
        try:
            with self.registry.transaction():
                return self.walker.reference(descriptor, set())
        finally:
            self.walker.prune_claims()

    def schema_for(self, tp: Any, *, inline: bool = False) -> SchemaNode:
        node = self.ensure_schema(tp)
        if inline and isinstance(node, SchemaRef):
            return self.registry.reference(node.name, inline=True)
        return node

    def infer_leaf_schema(self, tp: Any, *, inline: bool = False) -> SchemaNode:
        """Schema for a parameter or leaf type without registering new objects.

        Registered types are referenced (or cloned when ``inline``); complex
        types nobody registered degrade to a plain string schema.
        """
        descriptor = self.walker.descriptor(tp)
        shape = descriptor.shape
        if shape is TypeShape.NULLABLE:
            return make_nullable(self.infer_leaf_schema(descriptor.inner, inline=inline))
        if shape is TypeShape.ARRAY:
            return ArraySchema(
                items=self.infer_leaf_schema(descriptor.inner, inline=inline),
                unique_items=descriptor.unique_items,
            )
        if shape is TypeShape.MAP:
            value = self.walker.descriptor(descriptor.inner)
            if value.shape is TypeShape.PRIMITIVE and value.kind is PrimitiveKind.ANY:
                return ObjectSchema(additional_properties_allowed=True)
            return ObjectSchema(additional_properties=self.infer_leaf_schema(descriptor.inner, inline=inline))
        if self.walker.is_inline(descriptor):
            return self.walker.build(descriptor, set())

        if descriptor.name in self.registry:
            return self.registry.reference(descriptor.name, inline=inline)
        if shape is TypeShape.ENUM:
            return PrimitiveSchema(type=JsonType.STRING, enum=list(descriptor.enum_members))
        logger.warning("No schema registered for %s; falling back to a string schema", descriptor.name)
        return PrimitiveSchema(type=JsonType.STRING)

    def schema_exists(self, name: str) -> bool:
        return self.registry.exists(name)

    def render(self, node: SchemaNode) -> dict[str, Any]:
        return node.to_dict(self.config.ref_prefix)

    def components(self) -> dict[str, Any]:
        return {"schemas": self.registry.to_dict(self.config.ref_prefix)}

    def document(self, *, title: str = "schemacraft", version: str = "0.0.0") -> dict[str, Any]:
        """Minimal OpenAPI document carrying only the component schemas."""
        return {
            "openapi": self.openapi_version,
            "info": {"title": title, "version": version},
            "components": self.components(),
        }
