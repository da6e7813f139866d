"""Structured representation of schema documents."""
from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Tuple, Union

from conformity.engine.errors import SchemaDefinitionError
from conformity.engine.types import MISSING

Dependencies = Union[str, Tuple[str, ...], "Schema"]
AdditionalProperties = Union[bool, "Schema"]


@dataclass
class Schema:
    """One schema or sub-schema with a field per recognised constraint."""

    raw: Mapping[str, Any] = field(repr=False)
    types: Optional[Tuple[str, ...]] = None
    required: bool = False
    format: Optional[str] = None
    enum: Optional[Tuple[Any, ...]] = None
    pattern: Optional[re.Pattern] = None
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    exclusive_minimum: Optional[float] = None
    exclusive_maximum: Optional[float] = None
    divisible_by: Optional[float] = None
    items: Optional["Schema"] = None
    min_items: Optional[int] = None
    max_items: Optional[int] = None
    unique_items: bool = False
    dependencies: Optional[Dependencies] = None
    conform: Optional[Callable[[Any, Any], bool]] = None
    filters: Optional[Tuple[Any, ...]] = None
    default: Any = MISSING
    ref: Optional[str] = None
    messages: Optional[Mapping[str, str]] = None
    message: Optional[str] = None
    properties: Optional[Dict[str, "Schema"]] = None
    pattern_properties: Optional[Dict[str, Tuple[re.Pattern, "Schema"]]] = None
    additional_properties: Optional[AdditionalProperties] = None

    def expected(self, attribute: str) -> Any:
        """Return the declared value of a constraint, as written."""
        return self.raw.get(attribute)

    @property
    def has_default(self) -> bool:
        return self.default is not MISSING

    @property
    def describes_object(self) -> bool:
        return (
            self.properties is not None
            or self.pattern_properties is not None
            or self.additional_properties is not None
        )


def _as_pattern(value: Any, *, attribute: str) -> re.Pattern:
    if isinstance(value, re.Pattern):
        return value
    if isinstance(value, str):
        return re.compile(value)
    raise SchemaDefinitionError(f"{attribute} must be a string or compiled pattern, got {type(value).__name__}")


def _as_mapping(value: Any, *, attribute: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise SchemaDefinitionError(f"{attribute} must be a mapping, got {type(value).__name__}")
    return value


def _types(value: Any) -> Optional[Tuple[str, ...]]:
    if value is None:
        return None
    names = value if isinstance(value, (list, tuple)) else [value]
    if not all(isinstance(name, str) for name in names):
        raise SchemaDefinitionError(f"type must be a name or a list of names, got {value!r}")
    return tuple(name.lower().strip() for name in names)


def _dependencies(value: Any) -> Optional[Dependencies]:
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, (list, tuple)):
        return tuple(str(name) for name in value)
    return compile_schema(_as_mapping(value, attribute="dependencies"))


def _additional(value: Any) -> Optional[AdditionalProperties]:
    if value is None or isinstance(value, bool):
        return value
    return compile_schema(_as_mapping(value, attribute="additionalProperties"))


def _filters(value: Any) -> Optional[Tuple[Any, ...]]:
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        return tuple(value)
    return (value,)


def compile_schema(document: Union[Mapping[str, Any], Schema]) -> Schema:
    """Build a :class:`Schema` from a schema mapping, recursing into sub-schemas."""
    if isinstance(document, Schema):
        return document
    raw = _as_mapping(document, attribute="schema")

    ref = raw.get("$ref")
    if ref is not None and not isinstance(ref, str):
        raise SchemaDefinitionError(f"$ref must be a string, got {type(ref).__name__}")

    items = raw.get("items")
    if isinstance(items, (list, tuple)):
        raise SchemaDefinitionError("items must be a single schema; positional item schemas are not supported")

    properties = None
    if raw.get("properties") is not None:
        properties = {
            str(name): compile_schema(_as_mapping(sub, attribute=f"properties.{name}"))
            for name, sub in _as_mapping(raw["properties"], attribute="properties").items()
        }

    pattern_properties = None
    if raw.get("patternProperties") is not None:
        pattern_properties = {
            key: (re.compile(key), compile_schema(_as_mapping(sub, attribute=f"patternProperties.{key}")))
            for key, sub in _as_mapping(raw["patternProperties"], attribute="patternProperties").items()
        }

    enum = raw.get("enum")
    conform = raw.get("conform")
    if conform is not None and not callable(conform):
        raise SchemaDefinitionError("conform must be callable")

    return Schema(
        raw=raw,
        types=_types(raw.get("type")),
        required=raw.get("required") is True,
        format=raw.get("format"),
        enum=tuple(enum) if enum is not None else None,
        pattern=_as_pattern(raw["pattern"], attribute="pattern") if raw.get("pattern") is not None else None,
        min_length=raw.get("minLength"),
        max_length=raw.get("maxLength"),
        minimum=raw.get("minimum"),
        maximum=raw.get("maximum"),
        exclusive_minimum=raw.get("exclusiveMinimum"),
        exclusive_maximum=raw.get("exclusiveMaximum"),
        divisible_by=raw.get("divisibleBy"),
        items=compile_schema(_as_mapping(items, attribute="items")) if items is not None else None,
        min_items=raw.get("minItems"),
        max_items=raw.get("maxItems"),
        unique_items=bool(raw.get("uniqueItems")),
        dependencies=_dependencies(raw.get("dependencies")),
        conform=conform,
        filters=_filters(raw.get("filter")),
        default=raw.get("default", MISSING),
        ref=ref,
        messages=raw.get("messages"),
        message=raw.get("message"),
        properties=properties,
        pattern_properties=pattern_properties,
        additional_properties=_additional(raw.get("additionalProperties")),
    )
