"""Validation of whole objects against object-level schemas."""
from __future__ import annotations

from typing import TYPE_CHECKING, Any, Mapping, Set

from conformity.engine.report import child_path
from conformity.engine.types import MISSING
from conformity.schema.model import Schema

if TYPE_CHECKING:
    from conformity.engine.session import ValidationSession


class ObjectValidator:
    """Walks declared, pattern-matched and additional properties of an object."""

    def __init__(self, session: "ValidationSession") -> None:
        self._session = session

    def validate_object(self, obj: Mapping[Any, Any], schema: Schema, path: str) -> None:
        session = self._session
        schema = session.resolve(schema)
        present = list(obj.keys())
        visited: Set[Any] = set()

        if schema.properties:
            for name, sub_schema in schema.properties.items():
                if session.halted:
                    return
                visited.add(name)
                session.properties.validate_property(obj, obj.get(name, MISSING), name, sub_schema, path)

        if schema.pattern_properties:
            strict = session.options.strict_pattern_properties
            for regex, sub_schema in schema.pattern_properties.values():
                for name in present:
                    if session.halted:
                        return
                    matched = regex.search(str(name)) is not None
                    # Scanning marks every key as visited unless strict mode is on.
                    if matched or not strict:
                        visited.add(name)
                    if matched:
                        session.properties.validate_property(obj, obj[name], name, sub_schema, path)

        policy = schema.additional_properties
        if policy is None:
            policy = session.options.additional_properties
        unvisited = [name for name in present if name not in visited]
        if policy is False:
            for name in unvisited:
                if session.halted:
                    return
                session.record(
                    "additionalProperties",
                    name,
                    obj[name],
                    schema,
                    child_path(path, name),
                    expected=False,
                )
        elif isinstance(policy, Schema):
            for name in unvisited:
                if session.halted:
                    return
                session.properties.validate_property(obj, obj[name], name, policy, path)

