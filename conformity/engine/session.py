"""Per-call validation state shared by the object and property validators."""
from __future__ import annotations

from collections.abc import Mapping
from typing import Any, List, Optional

import structlog

from conformity.config.options import ValidationOptions
from conformity.engine.constraints import ConstraintEvaluator
from conformity.engine.errors import SchemaReferenceError
from conformity.engine.objects import ObjectValidator
from conformity.engine.report import ROOT_PATH, ValidationIssue, ValidationResult, interpolate, select_template
from conformity.engine.types import MISSING
from conformity.registry.filters import FilterRegistry
from conformity.registry.formats import FormatRegistry
from conformity.schema.model import Schema
from conformity.schema.store import SchemaStore

LOGGER = structlog.get_logger(__name__)


class ValidationSession:
    """Errors, options and the self-reference binding for one `validate` call.

    The session also wires the two mutually recursive walkers together: the
    object validator hands each property to the constraint evaluator, and the
    evaluator hands nested objects and dependency schemas back. Once an error
    is recorded under `exitOnFirstError` or `failOnFirstError`, ``halted`` is
    set and both walkers stop at their next check.
    """

    def __init__(
        self,
        *,
        root: Schema,
        store: SchemaStore,
        formats: FormatRegistry,
        filters: FilterRegistry,
        options: ValidationOptions,
    ) -> None:
        self.root = root
        self.store = store
        self.formats = formats
        self.filters = filters
        self.options = options
        self.errors: List[ValidationIssue] = []
        self.halted = False
        self.objects = ObjectValidator(self)
        self.properties = ConstraintEvaluator(self)

    def resolve(self, schema: Schema) -> Schema:
        """Follow `$ref` pointers until a concrete schema is reached."""
        seen = set()
        while schema.ref is not None:
            if schema.ref in seen:
                raise SchemaReferenceError(f"Cyclic $ref chain through {schema.ref!r}")
            seen.add(schema.ref)
            schema = self.store.resolve(schema.ref, current=self.root)
        return schema

    def record(
        self,
        attribute: str,
        prop: Any,
        actual: Any,
        schema: Schema,
        path: str,
        *,
        message: Optional[str] = None,
        expected: Any = MISSING,
    ) -> None:
        """Append an error and halt the walk when early exit is configured."""
        if expected is MISSING:
            expected = schema.expected(attribute)
        template = select_template(attribute, messages=schema.messages, message=schema.message, override=message)
        lookup = {"expected": expected, "attribute": attribute, "property": prop, "actual": actual}
        self.errors.append(
            ValidationIssue(
                attribute=attribute,
                property=prop,
                expected=expected,
                actual=actual,
                message=interpolate(template, lookup),
                path=path,
            )
        )
        if self.options.halts_on_error:
            self.halted = True
            LOGGER.debug("validation_halted", attribute=attribute, path=path)

    def run(self, obj: Any) -> ValidationResult:
        if not isinstance(obj, Mapping):
            raise TypeError(f"Object to validate must be a mapping, got {type(obj).__name__}")
        self.objects.validate_object(obj, self.root, ROOT_PATH)
        return ValidationResult(valid=not self.errors, errors=self.errors)
