"""Tests for folding annotation records into one constraint set."""

from __future__ import annotations

from schemacraft.annotations import (
    AnnotationRecord,
    Deprecated,
    NotEmpty,
    choices,
    default,
    description,
    extension,
    length,
    prop,
    required,
    value_range,
)
from schemacraft.merge import AnnotationMerger
from schemacraft.nodes import ArraySchema, JsonType, PrimitiveSchema, SchemaRef


def test_negative_count_is_unset_in_either_order() -> None:
    merger = AnnotationMerger()

    assert merger.merge([length(-1, None), length(5, None)]).min_length == 5
    assert merger.merge([length(5, None), length(-1, None)]).min_length == 5


def test_flags_are_ored() -> None:
    merged = AnnotationMerger().merge([Deprecated, prop(deprecated=False, read_only=True)])

    assert merged.deprecated is True
    assert merged.read_only is True


def test_text_keeps_last_non_empty_value() -> None:
    merger = AnnotationMerger()

    assert merger.merge([description("a"), description("b")]).description == "b"
    assert merger.merge([description("a"), description("  ")]).description == "a"


def test_enum_and_required_are_unioned_in_first_seen_order() -> None:
    merged = AnnotationMerger().merge(
        [choices("a", "b"), choices("b", "c"), required("x"), required("y", "x")]
    )

    assert merged.enum == ["a", "b", "c"]
    assert merged.required == ["x", "y"]


def test_default_keeps_last_non_null_value() -> None:
    merged = AnnotationMerger().merge([default(1), default(None)])

    assert merged.default == 1


def test_unknown_records_and_arguments_are_ignored() -> None:
    merger = AnnotationMerger()

    assert merger.merge([AnnotationRecord("Mystery", (1,))]).is_empty()
    assert merger.merge([prop(min_length=[1, 2], color="red")]).is_empty()


def test_camel_case_and_string_numbers_are_accepted() -> None:
    merged = AnnotationMerger().merge([prop(minLength=3), value_range("1.5", "10")])

    assert merged.min_length == 3
    assert merged.minimum == 1.5
    assert merged.maximum == 10


def test_extensions_gain_prefix() -> None:
    merged = AnnotationMerger().merge([extension("internal", True), extension("x-owner", "billing")])

    assert merged.extensions == {"x-internal": True, "x-owner": "billing"}


def test_apply_to_reference_keeps_only_title_and_description() -> None:
    merger = AnnotationMerger()
    ref = SchemaRef(name="Address")

    merger.apply_records([prop(description="Where to ship", min_length=4, deprecated=True)], ref)

    assert ref.to_dict() == {
        "$ref": "#/components/schemas/Address",
        "description": "Where to ship",
    }


def test_not_empty_resolves_per_node_kind() -> None:
    merger = AnnotationMerger()
    text = PrimitiveSchema(type=JsonType.STRING)
    items = ArraySchema(items=PrimitiveSchema(type=JsonType.INTEGER))

    merger.apply_records([NotEmpty], text)
    merger.apply_records([NotEmpty], items)

    assert text.to_dict() == {"type": "string", "minLength": 1}
    assert items.to_dict() == {"type": "array", "items": {"type": "integer"}, "minItems": 1}


def test_length_on_array_counts_items() -> None:
    items = ArraySchema(items=PrimitiveSchema(type=JsonType.STRING))

    AnnotationMerger().apply_records([length(None, 5)], items)

    assert items.to_dict() == {"type": "array", "items": {"type": "string"}, "maxItems": 5}


def test_exclusive_bounds_render_with_their_value() -> None:
    node = PrimitiveSchema(type=JsonType.NUMBER)

    AnnotationMerger().apply_records([prop(minimum=0, exclusive_minimum=True, maximum=10)], node)

    assert node.to_dict() == {"type": "number", "exclusiveMinimum": 0, "maximum": 10}
