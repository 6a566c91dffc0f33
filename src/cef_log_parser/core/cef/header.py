"""CEF header splitting and the optional syslog prefix."""

from __future__ import annotations

import re
from collections.abc import Callable
from datetime import datetime, tzinfo

from ..errors import HeaderEscapeError, MalformedHeaderError
from ..models import HeaderInfo

HEADER_SECTIONS = 8
_DELIMITERS = HEADER_SECTIONS - 1
_HEADER_ESCAPABLE = frozenset("\\|")

# <pri>Mon D HH:MM:SS [anything, e.g. host] CEF:<version>, or just CEF:<version>
_PREFIX_RE = re.compile(
    r"(?:<\d+>(?P<ts>[a-zA-Z]{3}\s+\d{1,2} \d{1,2}:\d{1,2}:\d{1,2}).*)?"
    r"CEF:(?P<version>\d+)",
    re.DOTALL | re.ASCII,
)


def split_header(line: str) -> list[str]:
    """Split a raw line into exactly 8 pipe-separated sections.

    ``\\|`` and ``\\\\`` are unescaped in the first seven sections. After the
    seventh delimiter the remainder of the line is taken verbatim, so pipes
    and backslashes in the extension never split it.
    """
    sections: list[str] = []
    buf: list[str] = []
    escaped = False

    for pos, c in enumerate(line):
        if escaped:
            if c not in _HEADER_ESCAPABLE:
                raise HeaderEscapeError(
                    f"Invalid escape sequence '\\{c}' at position {pos} in CEF header",
                    position=pos,
                    char=c,
                )
            buf.append(c)
            escaped = False
        elif c == "\\":
            escaped = True
        elif c == "|":
            sections.append("".join(buf))
            buf = []
            if len(sections) == _DELIMITERS:
                sections.append(line[pos + 1 :])
                return sections
        else:
            buf.append(c)

    raise MalformedHeaderError(
        "Message not recognized as CEF: 8 pipe-separated sections required, "
        f"found {len(sections) + 1}"
    )


def _parse_syslog_timestamp(value: str, *, tz: tzinfo, now: datetime) -> datetime:
    """Parse ``Mon D HH:MM:SS`` in the current year, keeping wall-clock fields."""
    # The year goes into the format so Feb 29 resolves against the current year.
    try:
        naive = datetime.strptime(f"{now.year} {value}", "%Y %b %d %H:%M:%S")
    except ValueError as exc:
        raise MalformedHeaderError(f"Invalid syslog timestamp '{value}': {exc}") from exc
    return naive.replace(tzinfo=tz)


def parse_header_prefix(
    section: str,
    *,
    tz: tzinfo,
    clock: Callable[[tzinfo], datetime] = datetime.now,
) -> HeaderInfo:
    """Extract timestamp and CEF version from the first header section."""
    m = _PREFIX_RE.fullmatch(section)
    if m is None:
        raise MalformedHeaderError(
            "This message was not recognized as CEF and could not be parsed."
        )

    now = clock(tz)
    ts_raw = m.group("ts")
    if ts_raw:
        timestamp = _parse_syslog_timestamp(ts_raw, tz=tz, now=now)
    else:
        # No syslog timestamp, use the current time.
        timestamp = now

    return HeaderInfo(timestamp=timestamp, version=int(m.group("version")))
