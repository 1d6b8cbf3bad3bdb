"""Best-effort capture of declared default values."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Mapping
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel
from pydantic_core import to_jsonable_python

from schemacraft.descriptors import PropertyDescriptor, TypeDescriptor

logger = logging.getLogger(__name__)


class _Absent:
    _instance: _Absent | None = None

    def __new__(cls) -> _Absent:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "ABSENT"

    def __bool__(self) -> bool:
        return False


ABSENT: Any = _Absent()

_ZERO_VALUES: dict[type, Any] = {
    bool: False,
    int: 0,
    float: 0.0,
    Decimal: Decimal(0),
    str: "",
    bytes: b"",
    bytearray: bytearray(),
    timedelta: timedelta(0),
    uuid.UUID: uuid.UUID(int=0),
    datetime: datetime.min,
    date: date.min,
    time: time.min,
}


def is_intrinsic_default(value: Any) -> bool:
    """True when ``value`` is what the declaration would hold without a default."""
    if value is None or value is ABSENT:
        return True
    if isinstance(value, Enum):
        return value.value == 0
    zero = _ZERO_VALUES.get(type(value), ABSENT)
    if zero is not ABSENT:
        return value == zero
    if isinstance(value, (list, tuple, set, frozenset, dict)):
        return len(value) == 0
    return False


def to_literal(value: Any) -> Any:
    """Convert a default value into its JSON wire form."""
    if isinstance(value, Enum):
        return value.name
    if isinstance(value, bool):
        return value
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True)
    return to_jsonable_python(value, fallback=str)


class DefaultValueCapturer:
    """Read property defaults from one instance per type.

    The instance comes from the descriptor's ``factory``; a factory that raises
    disables default capture for the whole type.
    """

    def __init__(self) -> None:
        self._instances: dict[Any, Any] = {}

    def instance_for(self, descriptor: TypeDescriptor) -> Any:
        cache_key = descriptor.key
        if cache_key in self._instances:
            return self._instances[cache_key]
        instance = ABSENT
        if descriptor.factory is not None:
            try:
                instance = descriptor.factory()
            except Exception as exc:
                logger.debug("Cannot instantiate %s to read defaults: %s", descriptor.name, exc)
                instance = ABSENT
        self._instances[cache_key] = instance
        return instance

    def capture(self, descriptor: TypeDescriptor, prop: PropertyDescriptor) -> Any:
        """Wire literal of the property's default, or ``ABSENT``."""
        instance = self.instance_for(descriptor)
        if instance is ABSENT:
            return ABSENT
        value = self._read(instance, prop.attribute_name)
        if is_intrinsic_default(value):
            return ABSENT
        try:
            return to_literal(value)
        except Exception as exc:
            logger.debug("Cannot convert default of %s.%s: %s", descriptor.name, prop.name, exc)
            return ABSENT

    def _read(self, instance: Any, attribute: str) -> Any:
        if isinstance(instance, Mapping):
            return instance.get(attribute, ABSENT)
        try:
            return getattr(instance, attribute, ABSENT)
        except Exception as exc:
            logger.debug("Reading %r from %r failed: %s", attribute, type(instance).__name__, exc)
            return ABSENT
