"""Text normalization helpers for subtitle decoding."""

from __future__ import annotations

import re

_WHITESPACE_PATTERN = re.compile(r"\s+")
_HTML_TAG_PATTERN = re.compile(r"<[^>]*>")
_ASS_TAG_PATTERN = re.compile(r"\{[^}]*\}")
_BYTE_ORDER_MARK = "\ufeff"


def normalize_line_endings(value: str) -> str:
    """Convert ``\\r\\n`` and bare ``\\r`` line endings to ``\\n``."""

    return value.replace("\r\n", "\n").replace("\r", "\n")


def strip_byte_order_mark(value: str) -> str:
    return value[1:] if value.startswith(_BYTE_ORDER_MARK) else value


def clean_subtitle_line(value: str) -> str:
    """Remove inline style directives and markup tags from a single line."""

    cleaned = _ASS_TAG_PATTERN.sub("", value)
    cleaned = _HTML_TAG_PATTERN.sub("", cleaned)
    cleaned = _WHITESPACE_PATTERN.sub(" ", cleaned)
    return cleaned.strip()


def format_seconds_token(seconds: float) -> str:
    """Return the shortest decimal form of ``seconds`` (``5`` rather than ``5.0``)."""

    value = float(seconds)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def format_clock_label(seconds: float) -> str:
    """Format a playback position as ``m:ss``."""

    total = max(0, int(seconds))
    minutes, secs = divmod(total, 60)
    return f"{minutes}:{secs:02d}"


__all__ = [
    "clean_subtitle_line",
    "format_clock_label",
    "format_seconds_token",
    "normalize_line_endings",
    "strip_byte_order_mark",
]
