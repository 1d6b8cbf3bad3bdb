"""Tests for reading Python declarations into type descriptors."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Literal, NewType, Optional, Union

import pytest

from schemacraft import Int64, SchemaCompiler, TypeShape, describe
from schemacraft.annotations import AnnotationRecord
from schemacraft.descriptors import PropertyDescriptor, TypeDescriptor, array_of, map_of, nullable, primitive
from schemacraft.errors import DescribeError
from schemacraft.kinds import PrimitiveKind


class Status(Enum):
    OPEN = "open"
    CLOSED = "closed"


InvoiceId = NewType("InvoiceId", Int64)


def test_primitive_and_wrapper_shapes() -> None:
    assert describe(int).shape is TypeShape.PRIMITIVE
    assert describe(int).kind is PrimitiveKind.INTEGER
    assert describe(None).kind is PrimitiveKind.NULL

    optional = describe(Optional[str])
    assert optional.shape is TypeShape.NULLABLE
    assert optional.inner is str

    pipe_optional = describe(int | None)
    assert pipe_optional.shape is TypeShape.NULLABLE
    assert pipe_optional.inner is int


def test_collection_shapes() -> None:
    listed = describe(list[int])
    assert listed.shape is TypeShape.ARRAY
    assert listed.inner is int
    assert listed.unique_items is False

    assert describe(set[str]).unique_items is True
    assert describe(tuple[int, ...]).inner is int

    mapped = describe(dict[str, float])
    assert mapped.shape is TypeShape.MAP
    assert mapped.inner is float


def test_enum_and_newtype_shapes() -> None:
    status = describe(Status)
    assert status.shape is TypeShape.ENUM
    assert status.enum_members == ["OPEN", "CLOSED"]

    invoice = describe(InvoiceId)
    assert invoice.shape is TypeShape.OBJECT
    assert invoice.base is Int64
    assert invoice.name == "InvoiceId"


def test_literal_becomes_constrained_primitive(compiler: SchemaCompiler) -> None:
    descriptor = describe(Literal["a", "b"])
    assert descriptor.shape is TypeShape.PRIMITIVE
    assert descriptor.annotations == [AnnotationRecord("Choices", ("a", "b"))]

    node = compiler.ensure_schema(Literal["a", "b"])
    assert compiler.render(node) == {"type": "string", "enum": ["a", "b"]}


def test_mixed_union_is_untyped(compiler: SchemaCompiler) -> None:
    assert describe(Union[int, str]).shape is TypeShape.UNKNOWN
    assert compiler.render(compiler.ensure_schema(Union[int, str])) == {}


def test_unresolvable_forward_reference_raises() -> None:
    @dataclass
    class Dangling:
        target: MissingType  # noqa: F821

    with pytest.raises(DescribeError) as excinfo:
        describe(Dangling)

    assert excinfo.value.code == "E2001"
    assert excinfo.value.exit_code == 2


def test_hand_built_descriptors_compile(compiler: SchemaCompiler) -> None:
    sku = TypeDescriptor(
        name="Sku",
        shape=TypeShape.OBJECT,
        properties=[
            PropertyDescriptor(name="code", declared_type=primitive(PrimitiveKind.TEXT), required=True),
            PropertyDescriptor(name="aliases", declared_type=array_of(str, unique=True)),
            PropertyDescriptor(name="weight", declared_type=nullable(float)),
            PropertyDescriptor(name="stock", declared_type=map_of(int)),
        ],
        factory=lambda: {"weight": 1.5},
    )

    assert compiler.ensure_schema(sku).to_dict() == {"$ref": "#/components/schemas/Sku"}
    assert compiler.components()["schemas"]["Sku"] == {
        "type": "object",
        "properties": {
            "code": {"type": "string"},
            "aliases": {"type": "array", "items": {"type": "string"}, "uniqueItems": True},
            "weight": {"type": ["number", "null"], "format": "double", "default": 1.5},
            "stock": {"type": "object", "additionalProperties": {"type": "integer"}},
        },
        "required": ["code"],
    }
