"""Value transforms applied through the `filter` constraint."""
from __future__ import annotations

from typing import Any, Callable, Dict, Optional

from conformity.engine.errors import FilterError

Filter = Callable[[Any], Any]


def _require_text(value: Any, name: str) -> str:
    if not isinstance(value, str):
        raise FilterError(f"{name} expects a string, got {type(value).__name__}")
    return value


def trim(value: Any) -> str:
    return _require_text(value, "trim").strip()


def lowercase(value: Any) -> str:
    return _require_text(value, "lowercase").lower()


def uppercase(value: Any) -> str:
    return _require_text(value, "uppercase").upper()


def collapse_whitespace(value: Any) -> str:
    """Strip and fold internal runs of whitespace into single spaces."""
    return " ".join(_require_text(value, "collapse_whitespace").split())


BUILTIN_FILTERS: Dict[str, Filter] = {
    "trim": trim,
    "lowercase": lowercase,
    "uppercase": uppercase,
    "collapse_whitespace": collapse_whitespace,
}


class FilterRegistry:
    """Name to filter function lookup."""

    def __init__(self) -> None:
        self.filters: Dict[str, Filter] = dict(BUILTIN_FILTERS)

    def register(self, name: str, func: Filter) -> None:
        if not callable(func):
            raise TypeError(f"filter {name!r} must be callable")
        self.filters[name] = func

    def resolve(self, name: str) -> Optional[Filter]:
        return self.filters.get(name)
