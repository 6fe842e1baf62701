"""Pure parsing helpers for delimited delete request lines."""

from __future__ import annotations

MIN_FIELDS = 3

_ESCAPES = {"n": "\n", "r": "\r", "t": "\t", "\\": "\\"}


def strip_quotes(value: str) -> str:
    """Drop every double quote and surrounding whitespace."""
    return value.replace('"', "").strip()


def split_fields(line: str, separator: str) -> list[str]:
    """Split a trimmed line on a literal separator, keeping empty fields."""
    return [strip_quotes(token) for token in line.strip().split(separator)]


def unescape_inline_content(raw_value: str) -> str:
    """Expand ``\\n``, ``\\r``, ``\\t`` and ``\\\\`` in inline CSV data.

    Unknown escape sequences are kept verbatim, as is a trailing backslash.
    """
    if not raw_value:
        return raw_value

    parts: list[str] = []
    escaping = False
    for char in raw_value:
        if escaping:
            parts.append(_ESCAPES.get(char, "\\" + char))
            escaping = False
        elif char == "\\":
            escaping = True
        else:
            parts.append(char)

    if escaping:
        parts.append("\\")
    return "".join(parts)
