"""Schema store keyed by schema id."""
from __future__ import annotations

from typing import Any, Dict, Hashable, Iterator, Mapping, Optional, Union

import structlog

from conformity.engine.errors import SchemaNotFound
from conformity.schema.model import Schema, compile_schema

SELF_REFERENCE = "#"

LOGGER = structlog.get_logger(__name__)


class SchemaStore:
    """Holds compiled schemas shared across validation calls."""

    def __init__(self) -> None:
        self._schemas: Dict[Hashable, Schema] = {}

    def add(self, schema_id: Hashable, schema: Union[Mapping[str, Any], Schema]) -> "SchemaStore":
        """Compile and store a schema, replacing any previous entry for the id."""
        self._schemas[schema_id] = compile_schema(schema)
        LOGGER.debug("schema_added", schema_id=schema_id)
        return self

    def remove(self, schema_id: Hashable) -> "SchemaStore":
        """Drop a schema; unknown ids are ignored."""
        if self._schemas.pop(schema_id, None) is not None:
            LOGGER.debug("schema_removed", schema_id=schema_id)
        return self

    def resolve(self, schema_id: Hashable, *, current: Optional[Schema] = None) -> Schema:
        """Return the schema for an id, or ``current`` for the self reference."""
        if schema_id == SELF_REFERENCE:
            if current is None:
                raise SchemaNotFound(schema_id)
            return current
        try:
            return self._schemas[schema_id]
        except KeyError:
            raise SchemaNotFound(schema_id) from None

    def __contains__(self, schema_id: object) -> bool:
        return schema_id in self._schemas

    def __iter__(self) -> Iterator[Hashable]:
        return iter(self._schemas)

    def __len__(self) -> int:
        return len(self._schemas)
