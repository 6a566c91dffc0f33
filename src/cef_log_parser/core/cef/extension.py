"""CEF extension (key=value payload) tokenizer."""

from __future__ import annotations

from collections.abc import Iterable

from ..errors import DuplicateKeyError, ExtensionEscapeError

_EXTENSION_ESCAPABLE = frozenset("\\=")


def split_extension(payload: str) -> list[tuple[str, str]]:
    """Split an extension payload into ordered (key, value) pairs.

    Values may contain unescaped spaces: on every unescaped ``=`` the text
    since the previous ``=`` is split at its last space into the previous
    value and the next key. Only that single space is consumed; any other
    whitespace stays part of the value.

    Only ``\\\\`` and ``\\=`` are valid escapes. Any other escaped character
    rejects the whole payload.
    """
    pairs: list[tuple[str, str]] = []
    buf: list[str] = []
    current_key = ""
    escaped = False

    for pos, c in enumerate(payload):
        if escaped:
            if c not in _EXTENSION_ESCAPABLE:
                raise ExtensionEscapeError(
                    f"Invalid escape sequence '\\{c}' at position {pos} in CEF extension",
                    position=pos,
                    char=c,
                )
            buf.append(c)
            escaped = False
        elif c == "\\":
            escaped = True
        elif c == "=":
            preceding = "".join(buf)
            space = preceding.rfind(" ")
            if space == -1:
                # First key, there is no previous value to close.
                current_key = preceding
            else:
                pairs.append((current_key, preceding[:space]))
                current_key = preceding[space + 1 :]
            buf = []
        else:
            buf.append(c)

    pairs.append((current_key, "".join(buf)))
    return pairs


def fold_pairs(pairs: Iterable[tuple[str, str]]) -> dict[str, str]:
    """Build an ordered mapping from pairs; a repeated key rejects the message."""
    out: dict[str, str] = {}
    for key, value in pairs:
        if key in out:
            raise DuplicateKeyError(key)
        out[key] = value
    return out
