"""Parser configuration and environment overrides."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, replace
from datetime import UTC, timedelta, timezone, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

TIMEZONE_ENV = "CEF_PARSER_TIMEZONE"
HARD_LIMIT_ENV = "CEF_PARSER_HARD_LIMIT"

_OFFSET_RE = re.compile(r"^(?P<sign>[+-])(?P<h>\d{2}):?(?P<m>\d{2})$")


@dataclass(frozen=True, slots=True)
class ParserConfig:
    timezone: str = "UTC"
    encoding: str = "utf-8"
    decode_errors: str = "replace"

    # Record limits for the tool layer.
    default_limit: int = 200
    hard_limit: int = 5000


def resolve_timezone(name: str) -> tzinfo:
    """Resolve an IANA zone name, ``UTC``/``Z`` or a ``+HH:MM`` offset."""
    value = name.strip()
    if value.upper() in ("UTC", "Z"):
        return UTC

    m = _OFFSET_RE.match(value)
    if m:
        hours, minutes = int(m.group("h")), int(m.group("m"))
        if hours > 23 or minutes > 59:
            raise ValueError(f"Invalid UTC offset: {name}")
        offset = timedelta(hours=hours, minutes=minutes)
        if m.group("sign") == "-":
            offset = -offset
        return timezone(offset, name=value)

    try:
        return ZoneInfo(value)
    except (ZoneInfoNotFoundError, ValueError, OSError) as exc:
        raise ValueError(f"Unknown timezone: {name}") from exc


def resolve_parser_config(cfg: ParserConfig | None = None) -> ParserConfig:
    """Return config with optional env overrides applied."""
    if cfg is None:
        cfg = ParserConfig()

    tz_env = os.getenv(TIMEZONE_ENV)
    if tz_env:
        try:
            resolve_timezone(tz_env)
        except ValueError as exc:
            raise ValueError(f"{TIMEZONE_ENV} must be a valid timezone: {exc}") from exc
        cfg = replace(cfg, timezone=tz_env)

    limit_env = os.getenv(HARD_LIMIT_ENV)
    if limit_env:
        try:
            value = int(limit_env)
        except ValueError as exc:
            raise ValueError(f"{HARD_LIMIT_ENV} must be an integer") from exc
        if value < 1:
            raise ValueError(f"{HARD_LIMIT_ENV} must be >= 1")
        cfg = replace(cfg, hard_limit=value)

    return cfg
