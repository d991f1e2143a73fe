"""Helpers to clean environment variable values before validation."""

from __future__ import annotations

from typing import Any


def strip_inline_comment(value: str) -> str:
    """Drop a trailing ``  # comment`` from an env value.

    Some env-file loaders keep inline comments, so ``300  # five minutes``
    reaches the process environment verbatim. A ``#`` only starts a comment
    when whitespace precedes it, so ``a#b`` is kept as-is.
    """

    idx = value.find("#")
    if idx == -1:
        return value.strip()
    if idx == 0:
        return ""
    if not value[idx - 1].isspace():
        return value.strip()
    return value[:idx].strip()


def sanitize_inline_numeric(value: Any) -> Any:
    """Normalize numeric env vars that may carry inline comments."""

    if isinstance(value, str):
        cleaned = strip_inline_comment(value)
        if cleaned:
            return cleaned
    return value
