"""Runtime type classification for declared schema types."""
from __future__ import annotations

import enum
import math
from collections.abc import Mapping
from typing import Any, Optional, Sequence


class _Missing:
    """Marker for a property that is absent, as opposed to set to None."""

    _instance: Optional["_Missing"] = None

    def __new__(cls) -> "_Missing":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING = _Missing()


class SchemaType(str, enum.Enum):
    """Closed set of type names a schema may declare."""

    STRING = "string"
    NUMBER = "number"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    NULL = "null"
    ARRAY = "array"
    OBJECT = "object"
    ANY = "any"


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_integer(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, float) and math.isfinite(value) and value.is_integer()


def _is_array(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def matches(value: Any, type_name: SchemaType) -> bool:
    """Return True when ``value`` is an instance of ``type_name``."""
    if type_name is SchemaType.STRING:
        return isinstance(value, str)
    if type_name is SchemaType.NUMBER:
        return _is_number(value)
    if type_name is SchemaType.INTEGER:
        return _is_integer(value)
    if type_name is SchemaType.BOOLEAN:
        return isinstance(value, bool)
    if type_name is SchemaType.NULL:
        return value is None
    if type_name is SchemaType.ARRAY:
        return _is_array(value)
    if type_name is SchemaType.OBJECT:
        return isinstance(value, Mapping)
    return value is not MISSING


def kind_of(value: Any) -> SchemaType:
    """Return the intrinsic kind of a value, used when no type is declared."""
    if value is None:
        return SchemaType.NULL
    if isinstance(value, bool):
        return SchemaType.BOOLEAN
    if _is_number(value):
        return SchemaType.NUMBER
    if isinstance(value, str):
        return SchemaType.STRING
    if _is_array(value):
        return SchemaType.ARRAY
    if isinstance(value, Mapping):
        return SchemaType.OBJECT
    return SchemaType.ANY


def classify(value: Any, declared: Optional[Sequence[str]]) -> Optional[SchemaType]:
    """Resolve the first declared type name the value satisfies.

    Names are tried in declaration order, so ``["number", "integer"]`` resolves
    an integral value to ``number``. With nothing declared the value's own kind
    is returned. Unknown names never match. Returns None when nothing matches.
    """
    if declared is None:
        return kind_of(value)
    for name in declared:
        try:
            type_name = SchemaType(name)
        except ValueError:
            continue
        if matches(value, type_name):
            return type_name
    return None
