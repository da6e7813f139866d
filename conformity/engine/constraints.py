"""Per-property constraint evaluation."""
from __future__ import annotations

import copy
import math
import re
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Hashable, Mapping, Optional, Tuple

import orjson
import structlog

from conformity.engine.report import child_path
from conformity.engine.types import MISSING, SchemaType, classify, kind_of
from conformity.schema.model import Schema

if TYPE_CHECKING:
    from conformity.engine.session import ValidationSession

LOGGER = structlog.get_logger(__name__)

_NUMERIC_RE = re.compile(r"^\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?\s*$")
_INTEGRAL_RE = re.compile(r"^[+-]?\d+$")
_TRUE_TOKENS = ("true", "1")
_FALSE_TOKENS = ("false", "0")
_NUMERIC_TYPES = (("integer",), ("number",))

Slot = Tuple[Any, Hashable]


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _differs(left: Any, right: Any) -> bool:
    return type(left) is not type(right) or left != right


def _same(left: Any, right: Any) -> bool:
    if _is_number(left) and _is_number(right):
        return left == right
    return type(left) is type(right) and left == right


def _cast_number(value: Any) -> Any:
    if not isinstance(value, str) or not _NUMERIC_RE.match(value):
        return value
    text = value.strip()
    return int(text) if _INTEGRAL_RE.match(text) else float(text)


def _cast_boolean(value: Any) -> Any:
    if isinstance(value, str):
        if value in _TRUE_TOKENS:
            return True
        if value in _FALSE_TOKENS:
            return False
    elif _is_number(value):
        if value == 1:
            return True
        if value == 0:
            return False
    return value


def _decimal_places(value: float) -> int:
    exponent = Decimal(str(value)).as_tuple().exponent
    return -exponent if isinstance(exponent, int) and exponent < 0 else 0


def divisible(value: float, divisor: float) -> bool:
    """Check divisibility after scaling both operands to whole numbers."""
    if not (math.isfinite(value) and math.isfinite(divisor)):
        return False
    scale = Decimal(10) ** max(_decimal_places(value), _decimal_places(divisor))
    return (Decimal(str(value)) * scale) % (Decimal(str(divisor)) * scale) == 0


def _plain(value: Any) -> Any:
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, Mapping):
        return {key: _plain(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(item) for item in value]
    return value


def canonical(value: Any) -> bytes:
    """Canonical encoding used to compare array elements.

    Integral floats encode like ints. Values orjson cannot encode, such as
    ints beyond 64 bits, fall back to their ``repr``.
    """
    plain = _plain(value)
    try:
        return orjson.dumps(plain, option=orjson.OPT_SORT_KEYS | orjson.OPT_NON_STR_KEYS, default=repr)
    except orjson.JSONEncodeError:
        return repr(plain).encode()


def _unique(values: Any) -> bool:
    seen = set()
    for item in values:
        key = canonical(item)
        if key in seen:
            return False
        seen.add(key)
    return True


class ConstraintEvaluator:
    """Checks one property value against its sub-schema.

    ``owner`` is the object holding the property. ``slot`` is the
    ``(container, key)`` pair that cast and filter write-backs land on; it
    defaults to ``(owner, prop)`` and names the array and position when an
    array element is checked. ``path`` locates the container.
    """

    def __init__(self, session: "ValidationSession") -> None:
        self._session = session

    def validate_property(
        self,
        owner: Any,
        value: Any,
        prop: Hashable,
        schema: Schema,
        path: str,
        slot: Optional[Slot] = None,
    ) -> None:
        session = self._session
        options = session.options
        schema = session.resolve(schema)
        if slot is None:
            slot = (owner, prop)
        here = child_path(path, slot[1])

        if options.validate_default_value and schema.has_default and prop != "default":
            holder = {"default": copy.deepcopy(schema.default)}
            self.validate_property(holder, holder["default"], "default", schema, here)
            if session.halted:
                return

        if value is MISSING:
            if options.apply_default_value and schema.has_default:
                self._store(slot, copy.deepcopy(schema.default))
            elif schema.required and schema.types != (SchemaType.ANY.value,):
                session.record("required", prop, None, schema, here)
            return

        if options.cast:
            cast = self._cast(value, schema)
            if options.cast_source and _differs(cast, value):
                self._store(slot, cast)
            value = cast

        if schema.format is not None and options.validate_formats:
            predicate = session.formats.resolve(schema.format, use_extensions=options.validate_format_extensions)
            if predicate is None:
                if options.validate_formats_strict:
                    session.record("format", prop, value, schema, here)
                    return
            elif not predicate(value):
                session.record("format", prop, value, schema, here)
                return

        if schema.enum is not None and not any(_same(value, member) for member in schema.enum):
            session.record("enum", prop, value, schema, here)
            if session.halted:
                return

        self._check_dependencies(owner, prop, schema, path, here)
        if session.halted:
            return

        checkpoint = len(session.errors)
        resolved = classify(value, schema.types)
        if resolved is None:
            session.record("type", prop, kind_of(value).value, schema, here)
            return

        if schema.conform is not None and not schema.conform(value, owner):
            session.record("conform", prop, value, schema, here)
            if session.halted:
                return

        if resolved is SchemaType.STRING:
            self._check_string(value, prop, schema, here)
        elif resolved in (SchemaType.NUMBER, SchemaType.INTEGER):
            self._check_number(value, prop, schema, here)
        elif resolved is SchemaType.ARRAY:
            self._check_array(owner, value, prop, schema, here)
        elif resolved is SchemaType.OBJECT and schema.describes_object:
            session.objects.validate_object(value, schema, here)

        if schema.filters is not None and not session.halted and len(session.errors) == checkpoint:
            self._apply_filters(slot, prop, schema, here, resolved)

    def _cast(self, value: Any, schema: Schema) -> Any:
        if schema.types in _NUMERIC_TYPES:
            return _cast_number(value)
        if schema.types == ("boolean",):
            return _cast_boolean(value)
        return value

    @staticmethod
    def _store(slot: Slot, value: Any) -> None:
        container, key = slot
        container[key] = value

    def _check_dependencies(self, owner: Any, prop: Hashable, schema: Schema, path: str, here: str) -> None:
        session = self._session
        dependencies = schema.dependencies
        if dependencies is None:
            return
        if isinstance(dependencies, Schema):
            session.objects.validate_object(owner, dependencies, path)
            return
        names = (dependencies,) if isinstance(dependencies, str) else dependencies
        for name in names:
            if session.halted:
                return
            if not isinstance(owner, Mapping) or name not in owner:
                session.record("dependencies", prop, None, schema, here)

    def _constrain(self, attribute: str, declared: Any, passed: bool, prop: Hashable, actual: Any, schema: Schema, here: str) -> bool:
        """Record ``attribute`` when it is declared and failed; return False once halted."""
        if declared is not None and not passed:
            self._session.record(attribute, prop, actual, schema, here)
        return not self._session.halted

    def _check_string(self, value: str, prop: Hashable, schema: Schema, here: str) -> None:
        length = len(value)
        checks = (
            ("minLength", schema.min_length, lambda bound: length >= bound),
            ("maxLength", schema.max_length, lambda bound: length <= bound),
            ("pattern", schema.pattern, lambda regex: regex.search(value) is not None),
        )
        for attribute, declared, test in checks:
            passed = declared is None or test(declared)
            if not self._constrain(attribute, declared, passed, prop, value, schema, here):
                return

    def _check_number(self, value: float, prop: Hashable, schema: Schema, here: str) -> None:
        checks = (
            ("minimum", schema.minimum, lambda bound: value >= bound),
            ("maximum", schema.maximum, lambda bound: value <= bound),
            ("exclusiveMinimum", schema.exclusive_minimum, lambda bound: value > bound),
            ("exclusiveMaximum", schema.exclusive_maximum, lambda bound: value < bound),
            ("divisibleBy", schema.divisible_by, lambda divisor: divisible(value, divisor)),
        )
        for attribute, declared, test in checks:
            passed = declared is None or test(declared)
            if not self._constrain(attribute, declared, passed, prop, value, schema, here):
                return

    def _check_array(self, owner: Any, value: Any, prop: Hashable, schema: Schema, here: str) -> None:
        session = self._session
        if schema.items is not None:
            for position, element in enumerate(value):
                self.validate_property(owner, element, prop, schema.items, here, slot=(value, position))
                if session.halted:
                    return
        count = len(value)
        checks = (
            ("minItems", schema.min_items, lambda bound: count >= bound),
            ("maxItems", schema.max_items, lambda bound: count <= bound),
            ("uniqueItems", True if schema.unique_items else None, lambda _: _unique(value)),
        )
        for attribute, declared, test in checks:
            passed = declared is None or test(declared)
            if not self._constrain(attribute, declared, passed, prop, value, schema, here):
                return

    def _apply_filters(
        self,
        slot: Slot,
        prop: Hashable,
        schema: Schema,
        here: str,
        resolved: SchemaType,
    ) -> None:
        session = self._session
        if resolved in (SchemaType.ARRAY, SchemaType.OBJECT):
            session.record(
                "filter", prop, resolved.value, schema, here, message="bad property type for filtering: %{actual}"
            )
            return
        container, key = slot
        value = container[key]
        for spec in schema.filters:
            if isinstance(spec, str):
                func = session.filters.resolve(spec)
                if func is None:
                    session.record("filter", prop, spec, schema, here, message="unknown filter: %{actual}")
                    return
            elif callable(spec):
                func = spec
            else:
                session.record(
                    "filter", prop, type(spec).__name__, schema, here, message="bad filter type: %{actual}"
                )
                return
            try:
                value = func(value)
            except (ValueError, TypeError) as exc:
                LOGGER.debug("filter_failed", path=here, error=str(exc))
                session.record("filter", prop, str(exc), schema, here, message="error during filtering: %{actual}")
                return
            self._store(slot, value)
