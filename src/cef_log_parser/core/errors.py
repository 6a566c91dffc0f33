"""Errors raised when a CEF line has to be rejected as a whole."""

from __future__ import annotations

from .models import FailureReason


class CefParseError(ValueError):
    """Base class for fatal parse failures."""

    reason: FailureReason = FailureReason.MALFORMED_HEADER


class MalformedHeaderError(CefParseError):
    reason = FailureReason.MALFORMED_HEADER


class MalformedExtensionError(CefParseError):
    reason = FailureReason.MALFORMED_EXTENSION


class DuplicateKeyError(MalformedExtensionError):
    reason = FailureReason.DUPLICATE_KEY

    def __init__(self, key: str) -> None:
        super().__init__(f"Skipping malformed CEF message: duplicate key [{key}]")
        self.key = key


class InvalidEscapeError(CefParseError):
    """A backslash precedes a character the current section may not escape."""

    reason = FailureReason.INVALID_ESCAPE

    def __init__(self, message: str, *, position: int, char: str) -> None:
        super().__init__(message)
        self.position = position
        self.char = char


class HeaderEscapeError(InvalidEscapeError, MalformedHeaderError):
    reason = FailureReason.INVALID_ESCAPE


class ExtensionEscapeError(InvalidEscapeError, MalformedExtensionError):
    reason = FailureReason.INVALID_ESCAPE


class EmptyPayloadError(CefParseError):
    reason = FailureReason.EMPTY_PAYLOAD


class InvalidSeverityError(CefParseError):
    reason = FailureReason.INVALID_SEVERITY
