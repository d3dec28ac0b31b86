"""Playback failure state surfaced to the presentation layer."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import PurePath
from typing import Optional

# Containers that browser-style playback elements commonly refuse.
UNSUPPORTED_CONTAINER_SUFFIXES = frozenset({".mkv"})

GENERIC_PLAYBACK_MESSAGE = "Unable to play this video."
UNSUPPORTED_CONTAINER_MESSAGE = (
    "This player cannot play {suffix} files directly. Convert the video to MP4 and try again."
)


@dataclass(frozen=True, slots=True)
class PlaybackFailure:
    """Error reported by the playback element; synchronization stays halted."""

    reason: str
    message: str
    source_name: Optional[str] = None

    @classmethod
    def from_report(cls, reason: str, source_name: Optional[str] = None) -> "PlaybackFailure":
        suffix = PurePath(source_name).suffix.lower() if source_name else ""
        if suffix in UNSUPPORTED_CONTAINER_SUFFIXES:
            message = UNSUPPORTED_CONTAINER_MESSAGE.format(suffix=suffix.lstrip(".").upper())
        else:
            message = GENERIC_PLAYBACK_MESSAGE
        return cls(reason=(reason or "").strip() or "unknown", message=message, source_name=source_name)


__all__ = ["PlaybackFailure"]
