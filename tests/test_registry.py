"""Tests for the write-once schema registry."""

from __future__ import annotations

import pytest

from schemacraft.errors import MissingSchemaError
from schemacraft.nodes import JsonType, ObjectSchema, PrimitiveSchema, SchemaRef
from schemacraft.registry import SchemaRegistry


def test_ensure_builds_once_and_keeps_identity(registry: SchemaRegistry) -> None:
    calls: list[str] = []

    def builder() -> ObjectSchema:
        calls.append("built")
        return ObjectSchema()

    first = registry.ensure("Thing", builder)
    second = registry.ensure("Thing", builder)

    assert first is second
    assert calls == ["built"]
    assert registry.names() == ["Thing"]
    assert len(registry) == 1


def test_put_never_overwrites(registry: SchemaRegistry) -> None:
    original = PrimitiveSchema(type=JsonType.STRING)
    registry.put("Code", original)
    stored = registry.put("Code", PrimitiveSchema(type=JsonType.INTEGER))

    assert stored is original
    assert registry.get("Code") is original


def test_reference_by_name_and_inline_copy(registry: SchemaRegistry) -> None:
    node = ObjectSchema(properties={"id": PrimitiveSchema(type=JsonType.INTEGER)})
    registry.put("Item", node)

    ref = registry.reference("Item")
    assert isinstance(ref, SchemaRef)
    assert ref.to_dict() == {"$ref": "#/components/schemas/Item"}

    copy = registry.reference("Item", inline=True)
    assert copy is not node
    assert copy.to_dict() == node.to_dict()
    copy.properties["extra"] = PrimitiveSchema(type=JsonType.STRING)
    assert "extra" not in node.properties


def test_reference_to_missing_name_raises(registry: SchemaRegistry) -> None:
    with pytest.raises(MissingSchemaError) as excinfo:
        registry.reference("Ghost", requester="Order.items")

    error = excinfo.value
    assert error.code == "E1001"
    assert error.name == "Ghost"
    assert error.subject == "Order.items"
    assert "Order.items" in error.message


def test_transaction_rolls_back_on_error(registry: SchemaRegistry) -> None:
    registry.put("Kept", ObjectSchema())

    with pytest.raises(ValueError):
        with registry.transaction():
            registry.put("Dropped", ObjectSchema())
            raise ValueError("boom")

    assert registry.names() == ["Kept"]


def test_nested_transaction_rolls_back_with_outer(registry: SchemaRegistry) -> None:
    with pytest.raises(RuntimeError):
        with registry.transaction():
            with registry.transaction():
                registry.put("Inner", ObjectSchema())
            registry.put("Outer", ObjectSchema())
            raise RuntimeError("abort")

    assert len(registry) == 0


def test_to_dict_keeps_insertion_order(registry: SchemaRegistry) -> None:
    registry.put("B", PrimitiveSchema(type=JsonType.STRING))
    registry.put("A", PrimitiveSchema(type=JsonType.BOOLEAN))

    rendered = registry.to_dict("#/definitions/")
    assert list(rendered) == ["B", "A"]
    assert rendered["A"] == {"type": "boolean"}
