from __future__ import annotations

import dataclasses
import logging
from datetime import UTC, datetime, timedelta, timezone

import pytest

from cef_log_parser.core.cef import CefParser
from cef_log_parser.core.errors import (
    CefParseError,
    DuplicateKeyError,
    EmptyPayloadError,
    ExtensionEscapeError,
    HeaderEscapeError,
    InvalidSeverityError,
    MalformedExtensionError,
    MalformedHeaderError,
)
from cef_log_parser.core.models import FailureReason

NESSUS_LINE = (
    r"CEF:0|Nessus|Nessus||Nessus\|18405|Operating System: Windows|2| eventId=6 "
    r"categorySignificance=/Normal dst=8.8.8.8 atz=America/Chicago "
    r"ad.endTime.d=12/13/2016 15:32:13.000 CST "
    r"ad.__FILE__PATH=C:\\Users\\ANON\\Desktop\\scan.nessus aid=testtesttest\\\=\\\="
)


@pytest.fixture
def parser(fixed_clock) -> CefParser:
    return CefParser(tz=UTC, clock=fixed_clock)


def test_parse_ossec_line(parser: CefParser, ossec_line: str) -> None:
    record = parser.parse(ossec_line)

    assert record.timestamp == datetime(2026, 8, 14, 14, 26, 55, tzinfo=UTC)
    assert record.version == 0
    assert record.device_vendor == "Trend Micro Inc."
    assert record.device_product == "OSSEC HIDS"
    assert record.device_version == "v2.8.3"
    assert record.device_event_class_id == "2502"
    assert record.name == "User missed the password more than one time"
    assert record.severity == 10
    assert record.human_readable_severity == "VERY HIGH"
    assert record.message == (
        "Aug 14 14:26:53 ip-172-30-2-212 sshd[16217]: PAM 2 more authentication failures;"
    )

    assert record.fields["dvc"] == "ip-172-30-2-212"
    assert record.fields["spt"] == 22
    assert record.fields["SomeFloat"] == pytest.approx(90.01)
    assert record.fields["Location"] == "ip-172-30-2-212->/var/log/auth.log"
    assert record.fields["uid"] == 0
    assert record.fields["rhost"] == "116.31.116.17 "
    assert "cfp2" not in record.fields
    assert "cfp2Label" not in record.fields
    assert "cs2Label" not in record.fields


@pytest.mark.parametrize(
    ("token", "severity", "label"),
    [
        ("Low", 3, "LOW"),
        ("Medium", 6, "MEDIUM"),
        ("High", 8, "HIGH"),
        ("Very-High", 10, "VERY HIGH"),
        ("Unknown", -1, "UNKNOWN"),
    ],
)
def test_parse_named_severities(
    parser: CefParser, ossec_line: str, token: str, severity: int, label: str
) -> None:
    line = ossec_line.replace("|10|", f"|{token}|")
    record = parser.parse(line)
    assert record.severity == severity
    assert record.human_readable_severity == label


def test_parse_without_msg_field(parser: CefParser) -> None:
    record = parser.parse(
        "<132>Aug 14 14:26:55 CEF:0|Trend Micro Inc.|OSSEC HIDS|v2.8.3|2502|Name|10|"
        "dvc=ip-172-30-2-212 cs2=ip-172-30-2-212->/var/log/auth.log cs2Label=Location "
        "cfp2=90.01 cfp2Label=SomeFloat spt=22"
    )
    assert record.message is None
    assert record.fields["spt"] == 22
    assert record.fields["Location"] == "ip-172-30-2-212->/var/log/auth.log"


def test_parse_with_syslog_host(parser: CefParser, ossec_line: str) -> None:
    record = parser.parse(ossec_line.replace("14:26:55 CEF:0", "14:26:55 ossec-host CEF:0"))
    assert record.timestamp == datetime(2026, 8, 14, 14, 26, 55, tzinfo=UTC)
    assert record.device_vendor == "Trend Micro Inc."


def test_parse_without_syslog_prefix_uses_clock(parser: CefParser, ossec_line: str) -> None:
    record = parser.parse(ossec_line.removeprefix("<132>Aug 14 14:26:55 "))
    assert record.timestamp == datetime(2026, 3, 1, 12, 0, 0, tzinfo=UTC)


def test_parse_uses_provided_timezone(fixed_clock, ossec_line: str) -> None:
    tz = timezone(timedelta(hours=1))
    record = CefParser(tz=tz, clock=fixed_clock).parse(ossec_line)
    assert record.timestamp.utcoffset() == timedelta(hours=1)
    assert record.timestamp.hour == 14


def test_parse_nessus_escapes(parser: CefParser) -> None:
    record = parser.parse(NESSUS_LINE)

    assert record.device_vendor == "Nessus"
    assert record.device_version == ""
    assert record.device_event_class_id == "Nessus|18405"
    assert record.severity == 2
    assert record.human_readable_severity == "LOW"
    assert record.fields["eventId"] == 6
    assert record.fields["ad.endTime.d"] == "12/13/2016 15:32:13.000 CST"
    assert record.fields["ad.__FILE__PATH"] == "C:\\Users\\ANON\\Desktop\\scan.nessus"
    assert record.fields["aid"] == "testtesttest\\=\\="


def test_parse_is_idempotent(parser: CefParser, ossec_line: str) -> None:
    assert parser.parse(ossec_line) == parser.parse(ossec_line)


def test_record_is_immutable(parser: CefParser, ossec_line: str) -> None:
    record = parser.parse(ossec_line)
    with pytest.raises(dataclasses.FrozenInstanceError):
        record.severity = 1  # type: ignore[misc]
    with pytest.raises(TypeError):
        record.fields["spt"] = 23  # type: ignore[index]


def test_field_warnings_are_logged_and_sent_to_sink(
    fixed_clock, caplog: pytest.LogCaptureFixture
) -> None:
    seen: list[tuple[str, str]] = []
    parser = CefParser(tz=UTC, clock=fixed_clock, on_warning=lambda k, r: seen.append((k, r)))

    with caplog.at_level(logging.WARNING, logger="cef_log_parser.core.cef.parser"):
        outcome = parser.parse_with_warnings(
            "CEF:0|V|P|1.0|100|N|5|spt=abc cs1=x dvc=host"
        )

    assert dict(outcome.record.fields) == {"dvc": "host"}
    assert [w.key for w in outcome.warnings] == ["spt", "cs1"]
    assert [k for k, _ in seen] == ["spt", "cs1"]
    assert "Could not transform CEF field [spt]" in caplog.text


@pytest.mark.parametrize(
    ("line", "error", "reason"),
    [
        ("CEF:0|V|P|1.0|100|N|5", MalformedHeaderError, FailureReason.MALFORMED_HEADER),
        ("XEF:0|V|P|1.0|100|N|5|a=b", MalformedHeaderError, FailureReason.MALFORMED_HEADER),
        ("CEF:x|V|P|1.0|100|N|5|a=b", MalformedHeaderError, FailureReason.MALFORMED_HEADER),
        (r"CEF:0|V\P|P|1.0|100|N|5|a=b", HeaderEscapeError, FailureReason.INVALID_ESCAPE),
        ("CEF:0|V|P|1.0|100|N|11|a=b", InvalidSeverityError, FailureReason.INVALID_SEVERITY),
        ("CEF:0|V|P|1.0|100|N|-2|a=b", InvalidSeverityError, FailureReason.INVALID_SEVERITY),
        ("CEF:0|V|P|1.0|100|N|urgent|a=b", InvalidSeverityError, FailureReason.INVALID_SEVERITY),
        ("CEF:0|V|P|1.0|100|N|5|", EmptyPayloadError, FailureReason.EMPTY_PAYLOAD),
        ("CEF:0|V|P|1.0|100|N|5|a=1 a=2", DuplicateKeyError, FailureReason.DUPLICATE_KEY),
        (r"CEF:0|V|P|1.0|100|N|5|a=\x", ExtensionEscapeError, FailureReason.INVALID_ESCAPE),
    ],
)
def test_fatal_errors(parser: CefParser, line: str, error: type[CefParseError], reason) -> None:
    with pytest.raises(error) as exc_info:
        parser.parse(line)
    assert exc_info.value.reason is reason


def test_extension_failures_are_malformed_extension(parser: CefParser) -> None:
    for line in ("CEF:0|V|P|1.0|100|N|5|a=1 a=2", r"CEF:0|V|P|1.0|100|N|5|a=\x"):
        with pytest.raises(MalformedExtensionError):
            parser.parse(line)


def test_empty_header_fields_are_accepted(parser: CefParser) -> None:
    record = parser.parse("CEF:0||||||0|a=b")
    assert record.device_vendor == ""
    assert record.name == ""
    assert record.fields == {"a": "b"}


def test_default_parser_uses_utc() -> None:
    record = CefParser().parse("<1>Jan  1 00:00:00 CEF:0|V|P|1|1|N|1|a=b")
    assert record.timestamp.tzinfo is UTC
    assert record.timestamp.year == datetime.now(UTC).year
