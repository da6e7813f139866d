"""Named format predicates used by the `format` constraint."""
from __future__ import annotations

import ipaddress
import re
from typing import Any, Callable, Dict, Optional, Union

from dateutil import parser as dateparser

FormatPredicate = Callable[[Any], bool]
FormatSpec = Union[FormatPredicate, re.Pattern, str]

_EMAIL_RE = re.compile(
    r"^[A-Z0-9!#$%&'*+/=?^_`{|}~-]+(?:\.[A-Z0-9!#$%&'*+/=?^_`{|}~-]+)*"
    r"@(?:[A-Z0-9](?:[A-Z0-9-]*[A-Z0-9])?\.)+[A-Z]{2,}\.?$",
    re.IGNORECASE,
)
_DATE_TIME_RE = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(?:\.\d{1,3})?Z$")
_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d:[0-5]\d$")
_COLOR_NAMES = (
    "aqua|black|blue|fuchsia|gray|green|lime|maroon|navy|olive|orange|purple|red|silver|teal|white|yellow"
)
_COLOR_RE = re.compile(
    r"^(?:#[0-9a-f]{6}|#[0-9a-f]{3}"
    r"|rgb\(\s*[+-]?\d+%?\s*,\s*[+-]?\d+%?\s*,\s*[+-]?\d+%?\s*\)"
    rf"|{_COLOR_NAMES})$",
    re.IGNORECASE,
)
_HOST_NAME_RE = re.compile(
    r"^(?:(?:[a-zA-Z]|[a-zA-Z][a-zA-Z0-9-]*[a-zA-Z0-9])\.)*(?:[A-Za-z]|[A-Za-z][A-Za-z0-9-]*[A-Za-z0-9])$"
)
_URL_RE = re.compile(
    r"^(?:https?|ftp|git)://"
    r"(?:[^\s:@/]+(?::[^\s@/]*)?@)?"
    r"(?:(?:\d{1,3}\.){3}\d{1,3}"
    r"|(?:[a-z0-9\u00a1-\uffff](?:[a-z0-9\u00a1-\uffff-]*[a-z0-9\u00a1-\uffff])?\.)+[a-z\u00a1-\uffff]{2,}\.?"
    r"|localhost)"
    r"(?::\d*)?"
    r"(?:[/?#]\S*)?$",
    re.IGNORECASE,
)


def _pattern(regex: re.Pattern) -> FormatPredicate:
    def check(value: Any) -> bool:
        return isinstance(value, str) and regex.search(value) is not None

    return check


def _calendar(regex: re.Pattern) -> FormatPredicate:
    def check(value: Any) -> bool:
        if not isinstance(value, str) or regex.search(value) is None:
            return False
        try:
            dateparser.isoparse(value)
        except (ValueError, OverflowError):
            return False
        return True

    return check


def _ip(version: int) -> FormatPredicate:
    def check(value: Any) -> bool:
        if not isinstance(value, str):
            return False
        try:
            address = ipaddress.ip_address(value)
        except ValueError:
            return False
        return address.version == version

    return check


def _utc_millisec(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and value >= 0


def _regex(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    try:
        re.compile(value)
    except re.error:
        return False
    return True


CORE_FORMATS: Dict[str, FormatSpec] = {
    "email": _pattern(_EMAIL_RE),
    "ip-address": _ip(4),
    "ipv6": _ip(6),
    "date-time": _calendar(_DATE_TIME_RE),
    "date": _calendar(_DATE_RE),
    "time": _pattern(_TIME_RE),
    "color": _pattern(_COLOR_RE),
    "host-name": _pattern(_HOST_NAME_RE),
    "utc-millisec": _utc_millisec,
    "regex": _regex,
}

EXTENSION_FORMATS: Dict[str, FormatSpec] = {
    "url": _pattern(_URL_RE),
}


def as_predicate(spec: FormatSpec) -> FormatPredicate:
    """Normalise a registered format into a callable predicate."""
    if isinstance(spec, str):
        return _pattern(re.compile(spec))
    if isinstance(spec, re.Pattern):
        return _pattern(spec)
    if callable(spec):
        return spec
    raise TypeError(f"format must be a callable or a pattern, got {type(spec).__name__}")


class FormatRegistry:
    """Two-tier lookup of format predicates: extensions first, then core."""

    def __init__(self) -> None:
        self.core: Dict[str, FormatSpec] = dict(CORE_FORMATS)
        self.extensions: Dict[str, FormatSpec] = dict(EXTENSION_FORMATS)

    def register(self, name: str, spec: FormatSpec, *, extension: bool = False) -> None:
        """Add or replace a format in the chosen tier."""
        as_predicate(spec)
        target = self.extensions if extension else self.core
        target[name] = spec

    def resolve(self, name: str, *, use_extensions: bool = True) -> Optional[FormatPredicate]:
        """Return the predicate for ``name`` or None when it is unknown."""
        spec = self.extensions.get(name) if use_extensions else None
        if spec is None:
            spec = self.core.get(name)
        if spec is None:
            return None
        return as_predicate(spec)
