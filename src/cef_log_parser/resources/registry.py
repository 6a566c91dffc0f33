"""MCP resource registry.

Resources are addressable by URI and can be fetched by the MCP client on demand.
"""

from __future__ import annotations

import asyncio
import gzip
import os
from pathlib import Path
from typing import Any

from mcp.server.fastmcp import FastMCP

from cef_log_parser.core.cef import FIELD_SPECS
from cef_log_parser.tools.schemas import CefRecordOut

ALLOWED_FILE_SUFFIXES = {".cef", ".log", ".txt"}
BASE_DIR_ENV = "CEF_PARSER_BASE_DIR"
TEXT_ENCODING = "utf-8"
TEXT_ERRORS = "replace"

SAMPLE_CEF = (
    "<132>Aug 14 14:26:55 ossec-host CEF:0|Trend Micro Inc.|OSSEC HIDS|v2.8.3|2502|"
    "User missed the password more than one time|10|dvc=ip-172-30-2-212 cfp2=90.01 "
    "cfp2Label=SomeFloat spt=22 cs2=ip-172-30-2-212->/var/log/auth.log cs2Label=Location "
    "msg=PAM 2 more authentication failures\n"
    "CEF:0|Nessus|Nessus||Nessus\\|18405|Operating System: Windows|Low|"
    "eventId=6 dst=8.8.8.8 atz=America/Chicago\n"
)


def _base_dir() -> Path:
    """Return the resolved base directory for file resources."""
    raw = os.getenv(BASE_DIR_ENV, os.getcwd())
    return Path(raw).resolve()


def _safe_resolve(path: str) -> Path:
    """Resolve a path under the configured base directory."""
    base = _base_dir()
    p = Path(path).expanduser()
    if not p.is_absolute():
        p = base / p
    p = p.resolve()
    if base not in p.parents and p != base:
        raise ValueError("Path escapes base dir")
    return p


def _allowed_suffix(path: Path) -> str:
    """Return the effective suffix for allowlist checks."""
    suffix = path.suffix.lower()
    if suffix == ".gz":
        suffix = path.with_suffix("").suffix.lower()
    return suffix


def _resolve_resource_path(path: str) -> Path:
    """Resolve and validate a resource file path."""
    resolved = _safe_resolve(path)
    if not resolved.is_file():
        raise FileNotFoundError(f"File not found: {resolved}")
    if _allowed_suffix(resolved) not in ALLOWED_FILE_SUFFIXES:
        allowed = ", ".join(sorted(ALLOWED_FILE_SUFFIXES))
        raise ValueError(f"File type not allowed. Allowed: {allowed}.")
    return resolved


def _open_text(path: Path) -> str:
    """Read text from a file, supporting optional gzip compression."""
    if path.suffix.lower() == ".gz":
        with gzip.open(path, mode="rt", encoding=TEXT_ENCODING, errors=TEXT_ERRORS) as f:
            return f.read()
    return path.read_text(encoding=TEXT_ENCODING, errors=TEXT_ERRORS)


def field_type_table() -> dict[str, dict[str, Any]]:
    """Return the extension field type table as JSON-friendly data."""
    return {
        key: {"type": spec.type.value, "renamed_by": f"{key}Label" if spec.labelled else None}
        for key, spec in FIELD_SPECS.items()
    }


def register_resources(mcp: FastMCP) -> None:
    """Register resource handlers on the MCP server."""

    @mcp.resource("app://cef-parser/help")
    def help_resource() -> str:
        """Return a short list of available resource URIs."""
        allowed = ", ".join(sorted(ALLOWED_FILE_SUFFIXES))
        base = _base_dir()
        return (
            "Resources:\n"
            "- app://cef-parser/help\n"
            "- app://cef-parser/field-types\n"
            "- app://cef-parser/schemas/record\n"
            "- app://cef-parser/examples/sample-cef\n"
            f"- log://{{path}} (restricted to {BASE_DIR_ENV}; allowed: {allowed}, .gz)\n"
            f"\nBase directory: {base}\n"
        )

    @mcp.resource("app://cef-parser/examples/sample-cef")
    def sample_cef() -> str:
        """Return a tiny CEF sample for demos and tests."""
        return SAMPLE_CEF

    @mcp.resource("app://cef-parser/field-types")
    def field_types() -> dict[str, dict[str, Any]]:
        """Return the typed extension keys and their label fields."""
        return field_type_table()

    @mcp.resource("app://cef-parser/schemas/record")
    def record_schema() -> dict[str, Any]:
        """Return the JSON schema for parsed records."""
        return CefRecordOut.model_json_schema()

    @mcp.resource("log://{path}")
    async def read_log(path: str) -> str:
        """Return the full log contents."""
        p = _resolve_resource_path(path)
        return await asyncio.to_thread(_open_text, p)
