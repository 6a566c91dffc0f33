from __future__ import annotations

from datetime import UTC, timedelta
from zoneinfo import ZoneInfo

import pytest

from cef_log_parser.core.config import ParserConfig, resolve_parser_config, resolve_timezone


@pytest.mark.parametrize("name", ["UTC", "utc", "Z"])
def test_resolve_timezone_utc(name: str) -> None:
    assert resolve_timezone(name) is UTC


@pytest.mark.parametrize(
    ("name", "offset"),
    [
        ("+01:00", timedelta(hours=1)),
        ("-05:30", -timedelta(hours=5, minutes=30)),
        ("+0200", timedelta(hours=2)),
    ],
)
def test_resolve_timezone_offset(name: str, offset: timedelta) -> None:
    assert resolve_timezone(name).utcoffset(None) == offset


def test_resolve_timezone_iana() -> None:
    assert resolve_timezone("Europe/Berlin") == ZoneInfo("Europe/Berlin")


@pytest.mark.parametrize("name", ["Mars/Olympus", "+25:00", "not a zone"])
def test_resolve_timezone_invalid(name: str) -> None:
    with pytest.raises(ValueError):
        resolve_timezone(name)


def test_resolve_parser_config_defaults() -> None:
    assert resolve_parser_config() == ParserConfig()


def test_resolve_parser_config_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CEF_PARSER_TIMEZONE", "+01:00")
    monkeypatch.setenv("CEF_PARSER_HARD_LIMIT", "10")

    cfg = resolve_parser_config()

    assert cfg.timezone == "+01:00"
    assert cfg.hard_limit == 10


def test_resolve_parser_config_invalid_timezone(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CEF_PARSER_TIMEZONE", "Nowhere/Special")
    with pytest.raises(ValueError, match="CEF_PARSER_TIMEZONE"):
        resolve_parser_config()


@pytest.mark.parametrize("value", ["abc", "0", "-3"])
def test_resolve_parser_config_invalid_limit(monkeypatch: pytest.MonkeyPatch, value: str) -> None:
    monkeypatch.setenv("CEF_PARSER_HARD_LIMIT", value)
    with pytest.raises(ValueError, match="CEF_PARSER_HARD_LIMIT"):
        resolve_parser_config()
