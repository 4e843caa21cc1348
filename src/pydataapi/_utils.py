"""Validation helpers and field path escaping.

Field names may contain ``.`` and ``&``; on the wire those are written
``&.`` and ``&&`` so that an unescaped dot always separates two segments.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from pydataapi._errors import (
    ERR_MSG_EMPTY_FIELD_NAME,
    InvalidArgumentError,
    InvalidFieldExpressionError,
)

ESCAPE_CHAR = "&"
SEPARATOR = "."


def validate_has_length(value: Any, what: str = "field name") -> None:
    """Reject ``None`` and empty strings."""
    if value is None or (isinstance(value, str) and not value):
        raise InvalidArgumentError(
            f"{what} should not be null or empty",
            f"{what} is {value!r}",
        )


def unescape_field_path(path: str) -> list[str]:
    """Split an escaped field path into its raw segments.

    >>> unescape_field_path("a&.b.c&&d")
    ['a.b', 'c&d']
    """
    if path is None:
        raise InvalidArgumentError("path must not be null", "unescape_field_path(None)")

    segments: list[str] = []
    current: list[str] = []
    escape = False

    for i, ch in enumerate(path):
        if escape:
            if ch not in (SEPARATOR, ESCAPE_CHAR):
                raise InvalidFieldExpressionError(
                    path, f"Invalid escape sequence at position {i}", i
                )
            current.append(ch)
            escape = False
        elif ch == ESCAPE_CHAR:
            escape = True
        elif ch == SEPARATOR:
            if i == len(path) - 1:
                raise InvalidFieldExpressionError(
                    path, "Expression cannot end with an unescaped dot", i
                )
            segments.append("".join(current))
            current = []
        else:
            current.append(ch)

    if escape:
        raise InvalidFieldExpressionError(
            path, "Dangling escape character at end of string", len(path) - 1
        )

    segments.append("".join(current))
    return segments


def escape_single_expression(segment: str) -> str:
    """Escape the dots and ampersands of a single segment."""
    result = []
    for ch in segment:
        if ch in (SEPARATOR, ESCAPE_CHAR):
            result.append(ESCAPE_CHAR)
        result.append(ch)
    return "".join(result)


def escape_field_names(*segments: str) -> str:
    """Join raw segments into one escaped field path."""
    if not segments:
        return ""
    return SEPARATOR.join(escape_single_expression(s) for s in segments)


def as_segments(path: str | Iterable[str]) -> list[str]:
    """Normalize a path argument to a list of raw segments.

    Strings are parsed with :func:`unescape_field_path`; any other iterable
    is taken as already-unescaped segments.
    """
    if isinstance(path, str):
        validate_has_length(path)
        return unescape_field_path(path)
    if path is None:
        validate_has_length(path)
    segments = list(path)
    if not segments:
        raise InvalidArgumentError(
            ERR_MSG_EMPTY_FIELD_NAME,
            "empty segment list provided",
        )
    return segments
