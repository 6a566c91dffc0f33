"""JSON output models for parse results."""

from __future__ import annotations

from pydantic import BaseModel, Field

from cef_log_parser.core.log_service import LineResult
from cef_log_parser.core.models import CefRecord, FailureReason, FieldWarning


class FieldWarningOut(BaseModel):
    key: str = Field(description="Extension key that was dropped.")
    reason: str = Field(description="Why the field could not be typed.")


class CefRecordOut(BaseModel):
    timestamp: str = Field(description="ISO-8601 event time in the configured timezone.")
    version: int = Field(ge=0, description="CEF format version.")
    device_vendor: str
    device_product: str
    device_version: str
    device_event_class_id: str
    name: str
    severity: int = Field(ge=-1, le=10, description="-1 for unknown, else 0..10.")
    severity_label: str = Field(description="LOW, MEDIUM, HIGH, VERY HIGH or UNKNOWN.")
    message: str | None = Field(default=None, description="Value of the msg extension field.")
    fields: dict[str, int | float | str] = Field(default_factory=dict)
    line_no: int | None = None
    raw: str | None = None
    warnings: list[FieldWarningOut] = Field(default_factory=list)


class LineErrorOut(BaseModel):
    line_no: int | None = None
    reason: FailureReason
    error: str
    raw: str | None = None


class ParseReport(BaseModel):
    count: int = Field(description="Number of records returned.")
    failed: int = Field(description="Number of rejected lines seen.")
    records: list[CefRecordOut] = Field(default_factory=list)
    errors: list[LineErrorOut] = Field(default_factory=list)
    failures_by_reason: dict[str, int] = Field(default_factory=dict)


def record_to_out(
    record: CefRecord,
    *,
    line_no: int | None = None,
    raw: str | None = None,
    warnings: tuple[FieldWarning, ...] = (),
) -> CefRecordOut:
    """Convert a CefRecord into its JSON model."""
    return CefRecordOut(
        timestamp=record.timestamp.isoformat(),
        version=record.version,
        device_vendor=record.device_vendor,
        device_product=record.device_product,
        device_version=record.device_version,
        device_event_class_id=record.device_event_class_id,
        name=record.name,
        severity=record.severity,
        severity_label=record.human_readable_severity,
        message=record.message,
        fields=dict(record.fields),
        line_no=line_no,
        raw=raw,
        warnings=[FieldWarningOut(key=w.key, reason=w.reason) for w in warnings],
    )


def result_to_error(result: LineResult, *, include_raw: bool) -> LineErrorOut:
    """Convert a failed LineResult into its JSON model."""
    if result.error is None:
        raise ValueError(f"Line {result.line_no} was parsed successfully")
    return LineErrorOut(
        line_no=result.line_no,
        reason=result.error.reason,
        error=str(result.error),
        raw=result.raw if include_raw else None,
    )
