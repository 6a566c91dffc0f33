"""CEF severity normalization."""

from __future__ import annotations

import re

from ..errors import InvalidSeverityError
from ..models import severity_label

MIN_SEVERITY = -1
MAX_SEVERITY = 10

_NUMERIC_RE = re.compile(r"[+-]?[0-9]+")

_NAMED_SEVERITIES: dict[str, int] = {
    "low": 3,
    "med": 6,
    "medium": 6,
    "high": 8,
    "very high": 10,
    "very-high": 10,
    "unknown": -1,
}


def parse_severity(value: str) -> int:
    """Return the numeric severity for a numeric or named severity token."""
    if not _NUMERIC_RE.fullmatch(value):
        named = _NAMED_SEVERITIES.get(value.lower())
        if named is None:
            raise InvalidSeverityError(f"{value} is not a valid string or numeric severity")
        return named

    sev = int(value)
    if sev < MIN_SEVERITY or sev > MAX_SEVERITY:
        raise InvalidSeverityError(
            f"{value} is not a valid severity, should be 0..10, or -1 for unknown"
        )
    return sev
