"""In-memory schema node models and their dict rendering."""

from __future__ import annotations

from enum import Enum
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_REF_PREFIX = "#/components/schemas/"


class JsonType(str, Enum):
    STRING = "string"
    NUMBER = "number"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    OBJECT = "object"
    ARRAY = "array"
    NULL = "null"


class SchemaNodeBase(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    def to_dict(self, ref_prefix: str = DEFAULT_REF_PREFIX) -> dict[str, Any]:
        raise NotImplementedError

    def clone(self) -> SchemaNodeBase:
        """Structural copy that shares nothing with the original."""
        return self.model_copy(deep=True)


class ConcreteSchema(SchemaNodeBase):
    """Keywords shared by every node that carries its own constraints."""

    title: str | None = None
    description: str | None = None
    format: str | None = None
    nullable: bool = False

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
    required: list[str] = Field(default_factory=list)
    unevaluated_properties: bool | None = None

    read_only: bool = False
    write_only: bool = False
    deprecated: bool = False

    default: Any = None
    example: Any = None
    examples: list[Any] | None = None
    enum: list[Any] | None = None
    extensions: dict[str, Any] = Field(default_factory=dict)

    def _type_keyword(self, payload: dict[str, Any], kind: JsonType | None) -> None:
        if kind is None:
            return
        if self.nullable and kind is not JsonType.NULL:
            payload["type"] = [kind.value, JsonType.NULL.value]
        else:
            payload["type"] = kind.value

    def _constraint_keywords(self, payload: dict[str, Any]) -> None:
        if self.format:
            payload["format"] = self.format
        if self.title:
            payload["title"] = self.title
        if self.description:
            payload["description"] = self.description

        if self.minimum is not None:
            payload["exclusiveMinimum" if self.exclusive_minimum else "minimum"] = self.minimum
        if self.maximum is not None:
            payload["exclusiveMaximum" if self.exclusive_maximum else "maximum"] = self.maximum
        if self.multiple_of is not None:
            payload["multipleOf"] = self.multiple_of

        if self.min_length is not None:
            payload["minLength"] = self.min_length
        if self.max_length is not None:
            payload["maxLength"] = self.max_length
        if self.pattern:
            payload["pattern"] = self.pattern

        if self.min_items is not None:
            payload["minItems"] = self.min_items
        if self.max_items is not None:
            payload["maxItems"] = self.max_items
        if self.unique_items:
            payload["uniqueItems"] = True

        if self.min_properties is not None:
            payload["minProperties"] = self.min_properties
        if self.max_properties is not None:
            payload["maxProperties"] = self.max_properties
        if self.required:
            payload["required"] = list(self.required)
        if self.unevaluated_properties is not None:
            payload["unevaluatedProperties"] = self.unevaluated_properties

        if self.read_only:
            payload["readOnly"] = True
        if self.write_only:
            payload["writeOnly"] = True
        if self.deprecated:
            payload["deprecated"] = True

        if self.enum:
            payload["enum"] = list(self.enum)
        if self.default is not None:
            payload["default"] = self.default
        if self.example is not None:
            payload["example"] = self.example
        if self.examples:
            payload["examples"] = list(self.examples)
        payload.update(self.extensions)


class PrimitiveSchema(ConcreteSchema):
    """Leaf value. ``type=None`` renders the permissive untyped schema ``{}``."""

    type: JsonType | None = None

    def to_dict(self, ref_prefix: str = DEFAULT_REF_PREFIX) -> dict[str, Any]:
        payload: dict[str, Any] = {}
        self._type_keyword(payload, self.type)
        self._constraint_keywords(payload)
        return payload


class ObjectSchema(ConcreteSchema):
    properties: dict[str, SchemaNode] = Field(default_factory=dict)
    additional_properties: SchemaNode | None = None
    additional_properties_allowed: bool | None = None

    def to_dict(self, ref_prefix: str = DEFAULT_REF_PREFIX) -> dict[str, Any]:
        payload: dict[str, Any] = {}
        self._type_keyword(payload, JsonType.OBJECT)
        if self.properties:
            payload["properties"] = {
                name: node.to_dict(ref_prefix) for name, node in self.properties.items()
            }
        if self.additional_properties is not None:
            payload["additionalProperties"] = self.additional_properties.to_dict(ref_prefix)
        elif self.additional_properties_allowed is not None:
            payload["additionalProperties"] = self.additional_properties_allowed
        self._constraint_keywords(payload)
        return payload


class ArraySchema(ConcreteSchema):
    items: SchemaNode

    def to_dict(self, ref_prefix: str = DEFAULT_REF_PREFIX) -> dict[str, Any]:
        payload: dict[str, Any] = {}
        self._type_keyword(payload, JsonType.ARRAY)
        payload["items"] = self.items.to_dict(ref_prefix)
        self._constraint_keywords(payload)
        return payload


class SchemaRef(SchemaNodeBase):
    """Named pointer into a registry; only title and description may ride along."""

    name: str
    title: str | None = None
    description: str | None = None

    def to_dict(self, ref_prefix: str = DEFAULT_REF_PREFIX) -> dict[str, Any]:
        payload: dict[str, Any] = {"$ref": f"{ref_prefix}{self.name}"}
        if self.title:
            payload["title"] = self.title
        if self.description:
            payload["description"] = self.description
        return payload


class CompositionSchema(SchemaNodeBase):
    """Inheritance: the base by reference plus the subtype's own object."""

    all_of: list[SchemaNode] = Field(default_factory=list)
    title: str | None = None
    description: str | None = None

    def to_dict(self, ref_prefix: str = DEFAULT_REF_PREFIX) -> dict[str, Any]:
        payload: dict[str, Any] = {"allOf": [node.to_dict(ref_prefix) for node in self.all_of]}
        if self.title:
            payload["title"] = self.title
        if self.description:
            payload["description"] = self.description
        return payload


class UnionSchema(SchemaNodeBase):
    """Nullable reference: ``anyOf`` of the target and a null marker."""

    any_of: list[SchemaNode] = Field(default_factory=list)
    title: str | None = None
    description: str | None = None

    def to_dict(self, ref_prefix: str = DEFAULT_REF_PREFIX) -> dict[str, Any]:
        payload: dict[str, Any] = {"anyOf": [node.to_dict(ref_prefix) for node in self.any_of]}
        if self.title:
            payload["title"] = self.title
        if self.description:
            payload["description"] = self.description
        return payload


SchemaNode = Union[
    PrimitiveSchema,
    ObjectSchema,
    ArraySchema,
    SchemaRef,
    CompositionSchema,
    UnionSchema,
]

for _model in (ObjectSchema, ArraySchema, CompositionSchema, UnionSchema):
    _model.model_rebuild()


def null_marker() -> PrimitiveSchema:
    return PrimitiveSchema(type=JsonType.NULL)


def untyped() -> PrimitiveSchema:
    return PrimitiveSchema()
