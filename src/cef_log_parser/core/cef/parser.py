"""CEF line parser: header, severity and extension in one pass per stage."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, tzinfo

from ..errors import EmptyPayloadError
from ..models import CefRecord, ParseOutcome
from .extension import fold_pairs, split_extension
from .fields import coerce_fields
from .header import parse_header_prefix, split_header
from .severity import parse_severity

logger = logging.getLogger(__name__)

WarningSink = Callable[[str, str], None]

MESSAGE_KEY = "msg"


@dataclass(frozen=True, slots=True)
class CefParser:
    """Parse single CEF lines into :class:`CefRecord` values.

    The parser holds only read-only configuration and can be shared between
    threads. Fatal problems raise :class:`~cef_log_parser.core.errors.CefParseError`;
    fields that cannot be typed are dropped, logged and passed to ``on_warning``.
    """

    tz: tzinfo = UTC
    clock: Callable[[tzinfo], datetime] = datetime.now
    on_warning: WarningSink | None = None

    def parse(self, line: str) -> CefRecord:
        """Parse one CEF line."""
        return self.parse_with_warnings(line).record

    def parse_with_warnings(self, line: str) -> ParseOutcome:
        """Parse one CEF line and return the record with its field warnings."""
        sections = split_header(line)
        header = parse_header_prefix(sections[0], tz=self.tz, clock=self.clock)
        vendor, product, device_version, class_id, name = sections[1:6]
        severity = parse_severity(sections[6])

        payload = sections[7]
        if not payload:
            raise EmptyPayloadError("No CEF payload found. Skipping this message.")

        fields, warnings = coerce_fields(fold_pairs(split_extension(payload)))
        for w in warnings:
            logger.warning("Could not transform CEF field [%s]: %s. Skipping.", w.key, w.reason)
            if self.on_warning is not None:
                self.on_warning(w.key, w.reason)

        message = fields.get(MESSAGE_KEY)
        record = CefRecord(
            timestamp=header.timestamp,
            version=header.version,
            device_vendor=vendor,
            device_product=product,
            device_version=device_version,
            device_event_class_id=class_id,
            name=name,
            severity=severity,
            message=str(message) if message is not None else None,
            fields=fields,
        )
        return ParseOutcome(record=record, warnings=tuple(warnings))
