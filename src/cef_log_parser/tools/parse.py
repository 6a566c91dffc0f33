"""MCP tool implementations.

This module contains the *implementation* behind the exposed MCP tools.
Keep this layer thin: validate inputs, translate them into core calls, and
return JSON-serializable data structures.
"""

from __future__ import annotations

from contextlib import aclosing
from typing import Any

from cef_log_parser.core.cef import CefParser
from cef_log_parser.core.config import ParserConfig, resolve_parser_config, resolve_timezone
from cef_log_parser.core.errors import CefParseError
from cef_log_parser.core.log_service import iter_results, summarize
from cef_log_parser.tools.schemas import (
    LineErrorOut,
    ParseReport,
    record_to_out,
    result_to_error,
)


def _parser_for(timezone: str | None, cfg: ParserConfig) -> CefParser:
    """Build a parser for an explicit timezone or the configured one."""
    name = timezone if timezone else cfg.timezone
    return CefParser(tz=resolve_timezone(name))


def parse_cef_line_impl(*, line: str, timezone: str | None = None) -> dict[str, Any]:
    """Implementation for the `parse_cef_line` MCP tool."""
    cfg = resolve_parser_config()
    parser = _parser_for(timezone, cfg)
    line = line.rstrip("\r\n")
    try:
        outcome = parser.parse_with_warnings(line)
    except CefParseError as exc:
        err = LineErrorOut(reason=exc.reason, error=str(exc))
        return {"ok": False, "error": err.model_dump(mode="json", exclude_none=True)}

    out = record_to_out(outcome.record, warnings=outcome.warnings)
    return {"ok": True, "record": out.model_dump(mode="json", exclude_none=True)}


async def parse_cef_log_impl(
    *,
    log_path: str,
    timezone: str | None = None,
    contains: str | None = None,
    limit: int | None = None,
    include_raw: bool = False,
    include_errors: bool = True,
) -> dict[str, Any]:
    """Implementation for the `parse_cef_log` MCP tool.

    Notes
    -----
    - limit caps the number of returned records; rejected lines are still
      counted while the file is read up to that point.
    - limit is hard-capped by ParserConfig.hard_limit (CEF_PARSER_HARD_LIMIT).
    """
    cfg = resolve_parser_config()
    if limit is None:
        limit = cfg.default_limit
    if limit <= 0:
        raise ValueError("limit must be > 0")
    if limit > cfg.hard_limit:
        limit = cfg.hard_limit

    parser = _parser_for(timezone, cfg)

    results = []
    records = []
    errors = []
    results_iter = iter_results(
        log_path,
        parser=parser,
        contains=contains,
        encoding=cfg.encoding,
        decode_errors=cfg.decode_errors,
    )
    async with aclosing(results_iter):
        async for result in results_iter:
            results.append(result)
            if result.record is not None:
                records.append(
                    record_to_out(
                        result.record,
                        line_no=result.line_no,
                        raw=result.raw if include_raw else None,
                        warnings=result.warnings,
                    )
                )
                if len(records) >= limit:
                    break
            elif include_errors:
                errors.append(result_to_error(result, include_raw=include_raw))

    summary = summarize(results)
    report = ParseReport(
        count=len(records),
        failed=summary.failed,
        records=records,
        errors=errors,
        failures_by_reason={k.value: v for k, v in summary.failures_by_reason.items()},
    )
    return report.model_dump(mode="json", exclude_none=True)
