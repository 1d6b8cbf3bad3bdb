"""schemacraft: compile annotated Python types into OpenAPI component schemas."""

from __future__ import annotations

from schemacraft.annotations import (
    AdditionalProperties,
    AnnotationRecord,
    AsArray,
    Deprecated,
    NotEmpty,
    RequiredProperty,
    choices,
    count,
    default,
    description,
    example,
    extension,
    length,
    pattern,
    prop,
    required,
    schema_component,
    title,
    value_range,
)
from schemacraft.compiler import SchemaCompiler
from schemacraft.config import SchemacraftConfig
from schemacraft.describe import TypeDescriber, describe
from schemacraft.descriptors import PropertyDescriptor, TypeDescriptor, TypeShape
from schemacraft.errors import (
    DescribeError,
    SchemaConfigurationError,
    SchemaError,
)
from schemacraft.kinds import Char, Email, Float32, Float64, Int32, Int64, UInt32, UInt64, Url
from schemacraft.registry import SchemaRegistry

__version__ = "0.3.0"
__all__ = [
    "AdditionalProperties",
    "AnnotationRecord",
    "AsArray",
    "Char",
    "Deprecated",
    "DescribeError",
    "Email",
    "Float32",
    "Float64",
    "Int32",
    "Int64",
    "NotEmpty",
    "PropertyDescriptor",
    "RequiredProperty",
    "SchemaCompiler",
    "SchemaConfigurationError",
    "SchemaError",
    "SchemaRegistry",
    "SchemacraftConfig",
    "TypeDescriber",
    "TypeDescriptor",
    "TypeShape",
    "UInt32",
    "UInt64",
    "Url",
    "choices",
    "count",
    "default",
    "describe",
    "description",
    "example",
    "extension",
    "length",
    "pattern",
    "prop",
    "required",
    "schema_component",
    "title",
    "value_range",
]
