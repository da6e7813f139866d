"""Exceptions raised by the validation engine."""
from __future__ import annotations

from typing import Any, Hashable

from conformity.engine.report import render_value


class ConformityError(Exception):
    """Base class for every error the engine raises itself."""


class SchemaNotFound(ConformityError, LookupError):
    """Raised when a schema id is not present in the store."""

    def __init__(self, schema_id: Hashable) -> None:
        super().__init__(f"Schema not found: {schema_id!r}")
        self.schema_id = schema_id


class SchemaDefinitionError(ConformityError, ValueError):
    """Raised when a schema document is structurally malformed."""


class SchemaReferenceError(ConformityError):
    """Raised when a chain of `$ref` pointers loops back on itself."""


class FilterError(ValueError):
    """Raised by a filter to signal that a value cannot be filtered."""


class ValidatorError(ConformityError):
    """Raised by `failOnFirstError` validation, carrying the first issue."""

    def __init__(self, issue: Any) -> None:
        super().__init__(
            f"Attribute `{issue.attribute}` of property `{issue.property}` hasn't passed check, "
            f"expected value: `{render_value(issue.expected)}` actual value: `{render_value(issue.actual)}` "
            f"error message: `{issue.message}`"
        )
        self.issue = issue

