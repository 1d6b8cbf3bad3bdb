"""Leaf value kinds and their schema fragments."""

from __future__ import annotations

import uuid
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from enum import Enum
from typing import Any, NewType

from schemacraft.nodes import (
    ConcreteSchema,
    JsonType,
    PrimitiveSchema,
    SchemaNode,
    UnionSchema,
    null_marker,
)

Int32 = NewType("Int32", int)
Int64 = NewType("Int64", int)
UInt32 = NewType("UInt32", int)
UInt64 = NewType("UInt64", int)
Float32 = NewType("Float32", float)
Float64 = NewType("Float64", float)
Char = NewType("Char", str)
Url = NewType("Url", str)
Email = NewType("Email", str)


class PrimitiveKind(str, Enum):
    TEXT = "text"
    CHAR = "char"
    BOOLEAN = "boolean"
    INTEGER = "integer"
    INT32 = "int32"
    INT64 = "int64"
    UINT32 = "uint32"
    UINT64 = "uint64"
    NUMBER = "number"
    FLOAT = "float"
    DOUBLE = "double"
    DECIMAL = "decimal"
    DATE = "date"
    DATE_TIME = "date-time"
    TIME = "time"
    DURATION = "duration"
    BINARY = "binary"
    UUID = "uuid"
    URI = "uri"
    EMAIL = "email"
    OBJECT = "object"
    NULL = "null"
    ANY = "any"


_KIND_FRAGMENTS: dict[PrimitiveKind, tuple[JsonType | None, str | None]] = {
    PrimitiveKind.TEXT: (JsonType.STRING, None),
    PrimitiveKind.CHAR: (JsonType.STRING, None),
    PrimitiveKind.BOOLEAN: (JsonType.BOOLEAN, None),
    PrimitiveKind.INTEGER: (JsonType.INTEGER, None),
    PrimitiveKind.INT32: (JsonType.INTEGER, "int32"),
    PrimitiveKind.INT64: (JsonType.INTEGER, "int64"),
    PrimitiveKind.UINT32: (JsonType.INTEGER, "int32"),
    PrimitiveKind.UINT64: (JsonType.INTEGER, "int64"),
    PrimitiveKind.NUMBER: (JsonType.NUMBER, None),
    PrimitiveKind.FLOAT: (JsonType.NUMBER, "float"),
    PrimitiveKind.DOUBLE: (JsonType.NUMBER, "double"),
    PrimitiveKind.DECIMAL: (JsonType.NUMBER, "decimal"),
    PrimitiveKind.DATE: (JsonType.STRING, "date"),
    PrimitiveKind.DATE_TIME: (JsonType.STRING, "date-time"),
    PrimitiveKind.TIME: (JsonType.STRING, "time"),
    PrimitiveKind.DURATION: (JsonType.STRING, "duration"),
    PrimitiveKind.BINARY: (JsonType.STRING, "binary"),
    PrimitiveKind.UUID: (JsonType.STRING, "uuid"),
    PrimitiveKind.URI: (JsonType.STRING, "uri"),
    PrimitiveKind.EMAIL: (JsonType.STRING, "email"),
    PrimitiveKind.OBJECT: (JsonType.OBJECT, None),
    PrimitiveKind.NULL: (JsonType.NULL, None),
    PrimitiveKind.ANY: (None, None),
}

PYTHON_KINDS: dict[Any, PrimitiveKind] = {
    str: PrimitiveKind.TEXT,
    bool: PrimitiveKind.BOOLEAN,
    int: PrimitiveKind.INTEGER,
    float: PrimitiveKind.DOUBLE,
    Decimal: PrimitiveKind.DECIMAL,
    date: PrimitiveKind.DATE,
    datetime: PrimitiveKind.DATE_TIME,
    time: PrimitiveKind.TIME,
    timedelta: PrimitiveKind.DURATION,
    bytes: PrimitiveKind.BINARY,
    bytearray: PrimitiveKind.BINARY,
    uuid.UUID: PrimitiveKind.UUID,
    object: PrimitiveKind.OBJECT,
    type(None): PrimitiveKind.NULL,
    Any: PrimitiveKind.ANY,
    Int32: PrimitiveKind.INT32,
    Int64: PrimitiveKind.INT64,
    UInt32: PrimitiveKind.UINT32,
    UInt64: PrimitiveKind.UINT64,
    Float32: PrimitiveKind.FLOAT,
    Float64: PrimitiveKind.DOUBLE,
    Char: PrimitiveKind.CHAR,
    Url: PrimitiveKind.URI,
    Email: PrimitiveKind.EMAIL,
}


class PrimitiveTypeMapper:
    """Static table from leaf kind to schema fragment."""

    def __init__(self, python_kinds: dict[Any, PrimitiveKind] | None = None) -> None:
        self._python_kinds = dict(PYTHON_KINDS)
        if python_kinds:
            self._python_kinds.update(python_kinds)

    def kind_for(self, tp: Any) -> PrimitiveKind | None:
        try:
            return self._python_kinds.get(tp)
        except TypeError:
            return None

    def is_primitive(self, tp: Any) -> bool:
        return self.kind_for(tp) is not None

    def schema_for(self, kind: PrimitiveKind) -> PrimitiveSchema:
        """Fresh fragment for ``kind``; callers may mutate it freely."""
        json_type, fmt = _KIND_FRAGMENTS[kind]
        schema = PrimitiveSchema(type=json_type, format=fmt)
        if kind is PrimitiveKind.CHAR:
            schema.min_length = 1
            schema.max_length = 1
        return schema


def make_nullable(node: SchemaNode) -> SchemaNode:
    """Fold a nullable flag into ``node``.

    Concrete schemas gain ``null`` in their own type set. References (and
    anything else that cannot carry constraints) are wrapped in an ``anyOf``
    with a null branch so the shared target stays untouched.
    """
    if isinstance(node, ConcreteSchema):
        if isinstance(node, PrimitiveSchema) and node.type in (None, JsonType.NULL):
            return node
        node.nullable = True
        return node
    if isinstance(node, UnionSchema):
        if not any(isinstance(member, PrimitiveSchema) and member.type is JsonType.NULL for member in node.any_of):
            node.any_of.append(null_marker())
        return node
    return UnionSchema(any_of=[node, null_marker()])
