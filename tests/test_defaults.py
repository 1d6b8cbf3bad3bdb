"""Tests for default value capture and literal conversion."""

from __future__ import annotations

import uuid
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from enum import Enum, IntEnum
from typing import Any

import pytest

from schemacraft.defaults import ABSENT, DefaultValueCapturer, is_intrinsic_default, to_literal
from schemacraft.descriptors import PropertyDescriptor, TypeDescriptor, TypeShape


class Level(IntEnum):
    NONE = 0
    SOME = 1


class Shade(Enum):
    DARK = "dark"


@pytest.mark.parametrize(
    "value",
    [
        None,
        0,
        0.0,
        Decimal(0),
        False,
        "",
        b"",
        timedelta(0),
        uuid.UUID(int=0),
        date.min,
        datetime.min,
        time.min,
        [],
        {},
        (),
        Level.NONE,
    ],
)
def test_intrinsic_values(value: Any) -> None:
    assert is_intrinsic_default(value)


@pytest.mark.parametrize("value", [1, -0.5, "x", True, [0], Level.SOME, Shade.DARK, date(2024, 1, 1)])
def test_non_intrinsic_values(value: Any) -> None:
    assert not is_intrinsic_default(value)


def test_literal_conversion() -> None:
    assert to_literal(Shade.DARK) == "DARK"
    assert to_literal(Decimal("2")) == 2
    assert to_literal(Decimal("2.5")) == 2.5
    assert to_literal(date(2024, 1, 31)) == "2024-01-31"
    assert to_literal(uuid.UUID(int=1)) == "00000000-0000-0000-0000-000000000001"
    assert to_literal((1, 2)) == [1, 2]


def _descriptor(factory: Any) -> TypeDescriptor:
    return TypeDescriptor(name="Probe", shape=TypeShape.OBJECT, factory=factory)


def test_factory_is_called_once_per_type() -> None:
    calls: list[int] = []

    def factory() -> dict[str, int]:
        calls.append(1)
        return {"a": 5, "b": 0}

    capturer = DefaultValueCapturer()
    descriptor = _descriptor(factory)

    assert capturer.capture(descriptor, PropertyDescriptor(name="a", declared_type=int)) == 5
    assert capturer.capture(descriptor, PropertyDescriptor(name="b", declared_type=int)) is ABSENT
    assert capturer.capture(descriptor, PropertyDescriptor(name="c", declared_type=int)) is ABSENT
    assert calls == [1]


def test_attribute_name_differs_from_property_name() -> None:
    capturer = DefaultValueCapturer()
    descriptor = _descriptor(lambda: {"display_name": "Widget"})
    prop = PropertyDescriptor(name="displayName", declared_type=str, attribute="display_name")

    assert capturer.capture(descriptor, prop) == "Widget"


def test_failing_factory_yields_absent() -> None:
    def factory() -> Any:
        raise ValueError("no default constructor")

    capturer = DefaultValueCapturer()
    descriptor = _descriptor(factory)

    assert capturer.capture(descriptor, PropertyDescriptor(name="a", declared_type=int)) is ABSENT
    assert capturer.instance_for(descriptor) is ABSENT
