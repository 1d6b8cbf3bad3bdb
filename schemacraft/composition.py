"""Translate single inheritance into references, arrays and ``allOf`` shells."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from schemacraft.descriptors import TypeDescriptor, TypeShape
from schemacraft.errors import InheritanceConflictError
from schemacraft.kinds import PrimitiveKind
from schemacraft.merge import ConstraintDescriptor
from schemacraft.nodes import (
    ArraySchema,
    CompositionSchema,
    ConcreteSchema,
    ObjectSchema,
    SchemaNode,
)

if TYPE_CHECKING:
    from schemacraft.walker import TypeGraphWalker


@dataclass
class NeedsObjectBuild:
    """The derived type needs its own object; ``shell`` already holds the base."""

    shell: CompositionSchema


class CompositionResolver:
    def __init__(self, walker: TypeGraphWalker) -> None:
        self.walker = walker

    def base_chain(self, descriptor: TypeDescriptor) -> list[TypeDescriptor]:
        """Declared bases of ``descriptor``, nearest first."""
        chain: list[TypeDescriptor] = []
        seen: set[int] = {id(descriptor)}
        current = descriptor
        while current.base is not None:
            base = self.walker.descriptor(current.base)
            if id(base) in seen:
                break
            seen.add(id(base))
            chain.append(base)
            if base.shape is not TypeShape.OBJECT:
                break
            current = base
        return chain

    def primitive_kind(self, descriptor: TypeDescriptor) -> PrimitiveKind | None:
        """Leaf kind when the base chain ends at a primitive, else ``None``."""
        if descriptor.base is None:
            return None
        chain = self.base_chain(descriptor)
        if chain and chain[-1].shape is TypeShape.PRIMITIVE:
            return chain[-1].kind
        return None

    def publishes_array(self, descriptor: TypeDescriptor) -> bool:
        """True when ``descriptor`` is emitted in place as an array of ``allOf`` items."""
        if descriptor.base is None or not descriptor.properties:
            return False
        if self.primitive_kind(descriptor) is not None:
            return False
        return self.walker.merger.merge(descriptor.annotations).array

    def try_resolve(self, descriptor: TypeDescriptor, visited: set[Any]) -> SchemaNode | NeedsObjectBuild:
        kind = self.primitive_kind(descriptor)
        if kind is not None:
            return self._named_primitive(descriptor, kind)

        merger = self.walker.merger
        merged = merger.merge(descriptor.annotations)
        base_node = self.walker.reference(descriptor.base, visited)

        if not descriptor.properties:
            if merged.array:
                array = ArraySchema(items=base_node)
                merger.apply(merged, array)
                return array
            merger.apply(merged, base_node)
            return base_node

        if merged.array:
            return self._array_of_composed(descriptor, merged, base_node, visited)

        return NeedsObjectBuild(shell=CompositionSchema(all_of=[base_node]))

    def _named_primitive(self, descriptor: TypeDescriptor, kind: PrimitiveKind) -> SchemaNode:
        records = []
        for base in reversed(self.base_chain(descriptor)):
            records.extend(base.annotations)
        records.extend(descriptor.annotations)

        merger = self.walker.merger
        merged = merger.merge(records)
        node = self.walker.mapper.schema_for(kind)
        merger.apply(merged, node)
        if not merged.array:
            return node
        array = ArraySchema(items=node)
        _move_array_constraints(node, array)
        return array

    def _array_of_composed(
        self,
        descriptor: TypeDescriptor,
        merged: ConstraintDescriptor,
        base_node: SchemaNode,
        visited: set[Any],
    ) -> ArraySchema:
        catch_all = [prop.name for prop in descriptor.properties if prop.catch_all]
        if merged.has_object_constraints() or catch_all:
            raise InheritanceConflictError(
                f"Type '{descriptor.name}' is published as an array but also declares "
                "object-only constraints.",
                subject=descriptor.name,
                details={"catch_all": catch_all},
            )

        # Never registered, so the key only guards this build's own subtree.
        visited.add(descriptor.key)
        sibling = ObjectSchema()
        try:
            self.walker.populate_object(descriptor, sibling, visited, required=merged.required)
        finally:
            visited.discard(descriptor.key)

        array = ArraySchema(items=CompositionSchema(all_of=[base_node, sibling]))
        self.walker.merger.apply(dataclasses.replace(merged, required=[]), array)
        return array


def _move_array_constraints(item: ConcreteSchema, array: ArraySchema) -> None:
    array.min_items, item.min_items = item.min_items, None
    array.max_items, item.max_items = item.max_items, None
    array.unique_items, item.unique_items = item.unique_items, False
