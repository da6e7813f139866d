"""Context binding for validation calls."""
from __future__ import annotations

import contextlib
from typing import Hashable, Iterator

from structlog.contextvars import bind_contextvars, unbind_contextvars


@contextlib.contextmanager
def schema_context(schema_id: Hashable) -> Iterator[None]:
    """Bind the schema under validation into every log line of the block."""
    bind_contextvars(schema_id=str(schema_id))
    try:
        yield
    finally:
        unbind_contextvars("schema_id")
