from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from collections.abc import Iterable, Sequence
from typing import TextIO

from cef_log_parser.core.cef import CefParser
from cef_log_parser.core.config import resolve_parser_config, resolve_timezone
from cef_log_parser.core.log_service import LineResult, get_results, parse_line, summarize
from cef_log_parser.tools.schemas import record_to_out, result_to_error


def _parse_timezone(s: str) -> str:
    try:
        resolve_timezone(s)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e
    return s


def _read_stream(
    stream: TextIO, parser: CefParser, *, contains: str | None
) -> list[LineResult]:
    out: list[LineResult] = []
    for line_no, line in enumerate(stream, start=1):
        line = line.rstrip("\r\n")
        if not line.strip():
            continue
        if contains is not None and contains not in line:
            continue
        out.append(parse_line(parser, line_no, line))
    return out


def _emit(results: Iterable[LineResult], *, include_raw: bool, fail_fast: bool) -> bool:
    """Print one JSON object per result. Returns False when stopped on an error."""
    for r in results:
        if r.record is not None:
            out = record_to_out(
                r.record,
                line_no=r.line_no,
                raw=r.raw if include_raw else None,
                warnings=r.warnings,
            )
        else:
            out = result_to_error(r, include_raw=include_raw)
        print(out.model_dump_json(exclude_none=True))
        if fail_fast and r.error is not None:
            return False
    return True


def main(argv: Sequence[str] | None = None) -> None:
    p = argparse.ArgumentParser(description="Parse CEF log lines into JSON records.")
    p.add_argument("log_path", nargs="?", default="-", help="Log file (plain or .gz); '-' reads stdin")
    p.add_argument(
        "--timezone",
        type=_parse_timezone,
        default=None,
        help="Zone for syslog timestamps (IANA name, UTC or +HH:MM). Default: CEF_PARSER_TIMEZONE or UTC",
    )
    p.add_argument("--contains", default=None, help="Only parse lines containing this substring")
    p.add_argument("--raw", dest="include_raw", action="store_true", help="Include raw line in output")
    p.add_argument("--fail-fast", action="store_true", help="Stop at the first rejected line (exit 1)")
    p.add_argument("--summary", action="store_true", help="Print parsed/failed counts to stderr")
    p.add_argument("-v", "--verbose", action="store_true", help="Log dropped fields and rejected lines")

    args = p.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.ERROR,
        stream=sys.stderr,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        cfg = resolve_parser_config()
        parser = CefParser(tz=resolve_timezone(args.timezone or cfg.timezone))
        if args.log_path == "-":
            results = _read_stream(sys.stdin, parser, contains=args.contains)
        else:
            results = asyncio.run(
                get_results(
                    args.log_path,
                    parser=parser,
                    contains=args.contains,
                    encoding=cfg.encoding,
                    decode_errors=cfg.decode_errors,
                )
            )
    except FileNotFoundError as e:
        print(str(e), file=sys.stderr)
        raise SystemExit(2)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        raise SystemExit(2)

    completed = _emit(results, include_raw=args.include_raw, fail_fast=args.fail_fast)

    summary = summarize(results)
    if args.summary:
        print(f"Parsed {summary.parsed} lines, rejected {summary.failed}.", file=sys.stderr)
        for reason, n in sorted(summary.failures_by_reason.items()):
            print(f"  {reason.value}: {n}", file=sys.stderr)

    if not completed or summary.parsed == 0:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
