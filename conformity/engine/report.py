"""Error records, validation reports and message templates."""
from __future__ import annotations

import re
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Hashable, List, Mapping, Optional

DEFAULT_MESSAGES: Dict[str, str] = {
    "required": "is required",
    "minLength": "is too short (minimum is %{expected} characters)",
    "maxLength": "is too long (maximum is %{expected} characters)",
    "pattern": "invalid input",
    "minimum": "must be greater than or equal to %{expected}",
    "maximum": "must be less than or equal to %{expected}",
    "exclusiveMinimum": "must be greater than %{expected}",
    "exclusiveMaximum": "must be less than %{expected}",
    "divisibleBy": "must be divisible by %{expected}",
    "minItems": "must contain more than %{expected} items",
    "maxItems": "must contain less than %{expected} items",
    "uniqueItems": "must hold a unique set of values",
    "format": "is not a valid %{expected}",
    "conform": "must conform to given constraint",
    "type": "must be of %{expected} type",
    "enum": "must be present in given enumerator",
    "dependencies": "depends on %{expected}",
    "additionalProperties": "is not allowed",
    "filter": "could not be filtered",
}
FALLBACK_MESSAGE = "no default message"

_TOKEN_RE = re.compile(r"%\{([a-z]+)\}", re.IGNORECASE)
ROOT_PATH = "$"


@dataclass
class ValidationIssue:
    """A single failed constraint."""

    attribute: str
    property: Any
    expected: Any
    actual: Any
    message: str
    path: str = "$"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class ValidationResult:
    """Outcome of validating one object."""

    valid: bool
    errors: List[ValidationIssue] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"valid": self.valid, "errors": [error.to_dict() for error in self.errors]}


def render_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return ",".join(render_value(item) for item in value)
    if isinstance(value, re.Pattern):
        return value.pattern
    return str(value)


def child_path(path: str, key: Hashable) -> str:
    """Extend a location: dotted for keys, bracketed for array indices."""
    if isinstance(key, int) and not isinstance(key, bool):
        return f"{path}[{key}]"
    return f"{path}.{key}"


def select_template(
    attribute: str,
    *,
    messages: Optional[Mapping[str, str]],
    message: Optional[str],
    override: Optional[str] = None,
) -> str:
    """Pick the template for an attribute, most specific first."""
    if override:
        return override
    if messages and messages.get(attribute):
        return messages[attribute]
    if message:
        return message
    return DEFAULT_MESSAGES.get(attribute, FALLBACK_MESSAGE)


def interpolate(template: str, lookup: Mapping[str, Any]) -> str:
    """Replace ``%{token}`` placeholders with values from ``lookup``."""
    return _TOKEN_RE.sub(lambda match: render_value(lookup.get(match.group(1).lower())), template)
