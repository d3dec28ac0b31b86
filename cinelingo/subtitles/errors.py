"""Common subtitle exceptions."""

from __future__ import annotations


class SubtitleDecodeError(RuntimeError):
    """Raised when a subtitle file cannot be read as text at all."""


__all__ = ["SubtitleDecodeError"]
