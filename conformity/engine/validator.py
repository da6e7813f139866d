"""Public validator: schema store, registries and options in one context."""
from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Dict, Hashable, Optional, Union

import structlog

from conformity.config.options import ValidationOptions
from conformity.engine.errors import ValidatorError
from conformity.engine.report import ValidationResult
from conformity.engine.session import ValidationSession
from conformity.observability.metrics import MetricsRegistry, record_duration
from conformity.observability.tracing import schema_context
from conformity.registry.filters import Filter, FilterRegistry
from conformity.registry.formats import FormatRegistry, FormatSpec
from conformity.schema.model import Schema, compile_schema
from conformity.schema.store import SchemaStore

LOGGER = structlog.get_logger(__name__)

SchemaRef = Union[Hashable, Mapping[str, Any], Schema]

INLINE_SCHEMA_ID = "<inline>"


class Validator:
    """Validates objects against schemas registered in its own store.

    Options are layered: built-in defaults, then the ``options`` given here
    (or later through :meth:`set_options`), then the ``options`` passed to a
    single :meth:`validate` call.
    """

    def __init__(self, options: Optional[Mapping[str, Any]] = None) -> None:
        self.store = SchemaStore()
        self.format_registry = FormatRegistry()
        self.filter_registry = FilterRegistry()
        self.metrics = MetricsRegistry()
        self.options = ValidationOptions().merged(options)

    @property
    def formats(self) -> Dict[str, FormatSpec]:
        return self.format_registry.core

    @property
    def format_extensions(self) -> Dict[str, FormatSpec]:
        return self.format_registry.extensions

    @property
    def filters(self) -> Dict[str, Filter]:
        return self.filter_registry.filters

    def add(self, schema_id: Hashable, schema: Union[Mapping[str, Any], Schema]) -> "Validator":
        self.store.add(schema_id, schema)
        return self

    def remove(self, schema_id: Hashable) -> "Validator":
        self.store.remove(schema_id)
        return self

    def set_options(self, options: Mapping[str, Any]) -> None:
        """Merge ``options`` into this validator's options; later keys win."""
        self.options = self.options.merged(options)

    def validate(
        self,
        obj: Mapping[str, Any],
        schema: SchemaRef,
        options: Optional[Mapping[str, Any]] = None,
    ) -> ValidationResult:
        """Validate ``obj`` against a stored schema id or an inline schema.

        Raises :class:`ValidatorError` for the first error when
        `failOnFirstError` is set, and :class:`SchemaNotFound` for unknown ids.
        """
        effective = self.options.merged(options)
        if isinstance(schema, (Mapping, Schema)):
            root = compile_schema(schema)
            label: Hashable = INLINE_SCHEMA_ID
        else:
            root = self.store.resolve(schema)
            label = schema

        session = ValidationSession(
            root=root,
            store=self.store,
            formats=self.format_registry,
            filters=self.filter_registry,
            options=effective,
        )
        with schema_context(label), record_duration(self.metrics, "validate_duration_ms"):
            result = session.run(obj)
            self._count(result)
            LOGGER.debug("validation_complete", valid=result.valid, error_count=len(result.errors))

        if effective.fail_on_first_error and result.errors:
            raise ValidatorError(result.errors[0])
        return result

    def _count(self, result: ValidationResult) -> None:
        self.metrics.incr("validations")
        if result.valid:
            return
        self.metrics.incr("validations_failed")
        self.metrics.incr("errors_recorded", len(result.errors))
        for issue in result.errors:
            self.metrics.incr(f"errors.{issue.attribute}")


validator = Validator()


def add(schema_id: Hashable, schema: Union[Mapping[str, Any], Schema]) -> Validator:
    """Register a schema on the process-wide default validator."""
    return validator.add(schema_id, schema)


def remove(schema_id: Hashable) -> Validator:
    return validator.remove(schema_id)


def set_options(options: Mapping[str, Any]) -> None:
    validator.set_options(options)


def validate(
    obj: Mapping[str, Any],
    schema: SchemaRef,
    options: Optional[Mapping[str, Any]] = None,
) -> ValidationResult:
    """Validate with the process-wide default validator."""
    return validator.validate(obj, schema, options)
