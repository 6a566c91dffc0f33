from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, tzinfo
from pathlib import Path

import pytest

OSSEC_LINE = (
    "<132>Aug 14 14:26:55 CEF:0|Trend Micro Inc.|OSSEC HIDS|v2.8.3|2502|"
    "User missed the password more than one time|10|dvc=ip-172-30-2-212 cfp2=90.01 "
    "cfp2Label=SomeFloat spt=22 cs2=ip-172-30-2-212->/var/log/auth.log cs2Label=Location "
    "msg=Aug 14 14:26:53 ip-172-30-2-212 sshd[16217]: PAM 2 more authentication failures; "
    "logname= uid=0 euid=0 tty=ssh ruser= rhost=116.31.116.17  user=root"
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "CEF_PARSER_TIMEZONE",
        "CEF_PARSER_HARD_LIMIT",
        "CEF_PARSER_BASE_DIR",
        "CEF_PARSER_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def ossec_line() -> str:
    return OSSEC_LINE


@pytest.fixture
def fixed_clock() -> Callable[[tzinfo], datetime]:
    def _clock(tz: tzinfo) -> datetime:
        return datetime(2026, 3, 1, 12, 0, 0, tzinfo=tz)

    return _clock


@pytest.fixture
def write_cef_log() -> Callable[[Path], None]:
    def _write(path: Path) -> None:
        path.write_text(
            "\n".join(
                [
                    OSSEC_LINE,
                    "CEF:0|Security|ThreatManager|1.0|100|Login failed|High|src=1.2.3.4 spt=1232",
                    "",
                    "not a cef line at all",
                    "CEF:0|Security|ThreatManager|1.0|101|Port scan|Medium|src=1.2.3.4 dpt=oops",
                    "CEF:0|Security|ThreatManager|1.0|102|Bad|42|src=1.2.3.4",
                    "CEF:0|Security|ThreatManager|1.0|103|Dup|3|src=1.2.3.4 src=5.6.7.8",
                ]
            )
            + "\n",
            encoding="utf-8",
        )

    return _write


@pytest.fixture
def write_bytes() -> Callable[[Path, list[bytes]], None]:
    def _write(path: Path, lines: list[bytes]) -> None:
        path.write_bytes(b"".join(line + b"\n" for line in lines))

    return _write
