"""Read CEF log files and parse them line by line.

This module is the integration point that turns a log file into parse results.
The parser itself never sees files; it is fed one line at a time.
"""

from __future__ import annotations

import gzip
import logging
from collections import Counter
from collections.abc import AsyncIterator, Iterable
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path

import aiofiles
from aiofiles.threadpool import wrap

from .cef import CefParser
from .config import ParserConfig, resolve_parser_config, resolve_timezone
from .errors import CefParseError
from .models import CefRecord, FailureReason, FieldWarning

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class LineResult:
    """Outcome of parsing one line: a record or the error that rejected it."""

    line_no: int
    raw: str
    record: CefRecord | None = None
    error: CefParseError | None = None
    warnings: tuple[FieldWarning, ...] = ()

    @property
    def ok(self) -> bool:
        return self.record is not None


@dataclass(frozen=True, slots=True)
class ParseSummary:
    parsed: int
    failed: int
    failures_by_reason: dict[FailureReason, int]


@asynccontextmanager
async def _open_text(path: Path, *, encoding: str, decode_errors: str):
    """Open a log file for async text reading (plain or gzip)."""
    if path.suffix.lower() == ".gz":
        f = gzip.open(path, mode="rt", encoding=encoding, errors=decode_errors)
        af = wrap(f)
        try:
            yield af
        finally:
            await af.close()
    else:
        async with aiofiles.open(path, encoding=encoding, errors=decode_errors) as f:
            yield f


def default_parser(cfg: ParserConfig | None = None) -> CefParser:
    """Parser configured from ``cfg`` (env overrides applied)."""
    cfg = resolve_parser_config(cfg)
    return CefParser(tz=resolve_timezone(cfg.timezone))


def parse_line(parser: CefParser, line_no: int, line: str) -> LineResult:
    """Parse one line, turning a fatal parse error into a failed result."""
    try:
        outcome = parser.parse_with_warnings(line)
    except CefParseError as exc:
        logger.debug("Rejected line %s (%s): %s", line_no, exc.reason.value, exc)
        return LineResult(line_no=line_no, raw=line, error=exc)
    return LineResult(
        line_no=line_no,
        raw=line,
        record=outcome.record,
        warnings=outcome.warnings,
    )


async def iter_results(
    log_path: str | Path,
    *,
    parser: CefParser | None = None,
    contains: str | None = None,
    encoding: str = "utf-8",
    decode_errors: str = "replace",
    skip_blank: bool = True,
) -> AsyncIterator[LineResult]:
    """Yield one parse result per (non-blank) line of a plain or gzipped file."""
    path = Path(log_path)
    if not path.is_file():
        raise FileNotFoundError(f"Log file not found: {path}")

    parser = parser or default_parser()

    async with _open_text(path, encoding=encoding, decode_errors=decode_errors) as f:
        async for line_no, line in _enumerate_async(f, start=1):
            line = line.rstrip("\r\n")
            if skip_blank and not line.strip():
                continue
            if contains is not None and contains not in line:
                continue
            yield parse_line(parser, line_no, line)


async def get_results(log_path: str | Path, **iter_kwargs) -> list[LineResult]:
    """Collect iter_results into a list."""
    return [r async for r in iter_results(log_path, **iter_kwargs)]


def summarize(results: Iterable[LineResult]) -> ParseSummary:
    """Count parsed and rejected lines, grouping failures by reason."""
    parsed = 0
    reasons: Counter[FailureReason] = Counter()
    for r in results:
        if r.error is None:
            parsed += 1
        else:
            reasons[r.error.reason] += 1
    return ParseSummary(
        parsed=parsed,
        failed=sum(reasons.values()),
        failures_by_reason=dict(reasons),
    )


async def _enumerate_async(iterable, start: int = 0):
    """Async enumerate helper for async iterators."""
    index = start
    async for item in iterable:
        yield index, item
        index += 1
