"""MCP prompt registry.

Prompts are predefined conversation/workflow templates that the client can invoke explicitly.
"""

from __future__ import annotations

from typing import Any

from mcp.server.fastmcp import FastMCP


def register_prompts(mcp: FastMCP) -> None:
    """Register prompt templates on the MCP server."""

    @mcp.prompt()
    def review_cef_log(
        log_path: str,
        timezone: str | None = None,
        min_severity: int = 7,
    ) -> list[dict[str, Any]]:
        """Build a prompt that reviews the events of a CEF log."""
        tz_line = f"- timezone: {timezone}" if timezone else "- timezone: server default"
        return [
            {
                "role": "system",
                "content": (
                    "You are a security analyst. Use the parse_cef_log tool to read CEF events. "
                    "Group related events by device and signature, call out rejected lines and "
                    "their failure reasons, and only describe what the parsed fields show."
                ),
            },
            {
                "role": "user",
                "content": (
                    "Review this CEF log:\n"
                    f"- log_path: {log_path}\n"
                    f"{tz_line}\n"
                    f"- focus on events with severity >= {min_severity}\n"
                    "Return a short summary followed by a list of notable events with their "
                    "line numbers."
                ),
            },
        ]

    @mcp.prompt()
    def explain_cef_line(line: str) -> list[dict[str, Any]]:
        """Build a prompt that explains a single CEF event."""
        return [
            {
                "role": "system",
                "content": (
                    "You are a precise assistant. Parse the event with the parse_cef_line tool "
                    "and explain each header value and extension field in plain language."
                ),
            },
            {
                "role": "user",
                "content": f"Explain this CEF event:\n{line}",
            },
        ]
