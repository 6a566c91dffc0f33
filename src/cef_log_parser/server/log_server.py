"""MCP server entrypoint (stdio transport).

This module wires together:
- Tools: parse a single CEF line or a whole CEF log file
- Resources: field type table, record schema, sample data, log files
- Prompts: reusable conversation templates that clients can invoke

Run locally (stdio):
    python -m cef_log_parser.server.log_server
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Any

from mcp.server.fastmcp import FastMCP

from cef_log_parser.prompts.registry import register_prompts
from cef_log_parser.resources.registry import register_resources
from cef_log_parser.tools.parse import parse_cef_line_impl, parse_cef_log_impl

LOGGER = logging.getLogger(__name__)

LOG_LEVEL_ENV = "CEF_PARSER_LOG_LEVEL"


def _configure_logging() -> None:
    """Configure a reasonable default logging setup.

    The MCP client typically captures stderr; keeping logs concise makes them easier to consume.
    """
    level_name = os.getenv(LOG_LEVEL_ENV, "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    logging.basicConfig(
        level=level,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


mcp = FastMCP("cef-parser", json_response=True)

register_resources(mcp)
register_prompts(mcp)


@mcp.tool()
def parse_cef_line(line: str, timezone: str | None = None) -> dict[str, Any]:
    """Parse one CEF line into a structured record.

    Parameters
    ----------
    line:
        A CEF line, optionally prefixed by a syslog envelope
        (e.g. "<132>Aug 14 14:26:55 host CEF:0|Vendor|Product|1.0|100|Name|5|src=1.2.3.4").
    timezone:
        Zone for syslog timestamps (IANA name, UTC or +HH:MM). Defaults to CEF_PARSER_TIMEZONE or UTC.

    Returns
    -------
    dict:
        {"ok": true, "record": {...}} or {"ok": false, "error": {"reason": str, "error": str}}
    """
    return parse_cef_line_impl(line=line, timezone=timezone)


@mcp.tool()
async def parse_cef_log(
    log_path: str,
    timezone: str | None = None,
    contains: str | None = None,
    limit: int | None = None,
    include_raw: bool = False,
    include_errors: bool = True,
) -> dict[str, Any]:
    """Parse every line of a CEF log file.

    Parameters
    ----------
    log_path:
        Path to a local log file. Supports plain text and .gz.
    timezone:
        Zone for syslog timestamps (IANA name, UTC or +HH:MM).
    contains:
        Substring filter applied to the raw line before parsing.
    limit:
        Maximum number of records returned (hard-capped in the implementation).
    include_raw:
        Whether to include the original raw line in each record and error.
    include_errors:
        Whether to list rejected lines with their failure reason.

    Returns
    -------
    dict:
        {"count": int, "failed": int, "records": list[dict], "errors": list[dict],
         "failures_by_reason": dict[str, int]}
    """
    return await parse_cef_log_impl(
        log_path=log_path,
        timezone=timezone,
        contains=contains,
        limit=limit,
        include_raw=include_raw,
        include_errors=include_errors,
    )


def main() -> None:
    """Start the MCP server over stdio."""
    _configure_logging()
    LOGGER.debug("Starting MCP server (transport=stdio)")
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
