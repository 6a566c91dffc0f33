"""Core data models for CEF parsing."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType

FieldValue = int | float | str


class FieldType(str, Enum):
    """Target type of a known CEF extension key."""

    STRING = "string"
    INT32 = "int32"
    INT64 = "int64"
    FLOAT32 = "float32"
    FLOAT64 = "float64"


class FailureReason(str, Enum):
    """Why a whole line was rejected."""

    MALFORMED_HEADER = "malformed_header"
    MALFORMED_EXTENSION = "malformed_extension"
    INVALID_ESCAPE = "invalid_escape"
    DUPLICATE_KEY = "duplicate_key"
    EMPTY_PAYLOAD = "empty_payload"
    INVALID_SEVERITY = "invalid_severity"


@dataclass(frozen=True, slots=True)
class HeaderInfo:
    """Timestamp and CEF version taken from the first header section."""

    timestamp: datetime
    version: int


@dataclass(frozen=True, slots=True)
class FieldWarning:
    """An extension field that was dropped during type coercion."""

    key: str
    reason: str


def severity_label(severity: int) -> str:
    """Human-readable bucket of a numeric severity."""
    if severity < 0:
        return "UNKNOWN"
    if severity <= 3:
        return "LOW"
    if severity <= 6:
        return "MEDIUM"
    if severity <= 8:
        return "HIGH"
    return "VERY HIGH"


@dataclass(frozen=True, slots=True)
class CefRecord:
    """Parsed CEF event. Immutable once built."""

    timestamp: datetime
    version: int
    device_vendor: str
    device_product: str
    device_version: str
    device_event_class_id: str
    name: str
    severity: int  # -1 (unknown) or 0..10
    message: str | None
    fields: Mapping[str, FieldValue] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Freeze the field map so callers cannot mutate a shared record.
        if not isinstance(self.fields, MappingProxyType):
            object.__setattr__(self, "fields", MappingProxyType(dict(self.fields)))

    @property
    def human_readable_severity(self) -> str:
        return severity_label(self.severity)


@dataclass(frozen=True, slots=True)
class ParseOutcome:
    """A record plus the diagnostics produced while building it."""

    record: CefRecord
    warnings: tuple[FieldWarning, ...] = ()
