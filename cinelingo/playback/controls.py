"""Requests the synchronizer issues to the host playback element."""

from __future__ import annotations

from typing import Protocol


class PlayerControls(Protocol):
    """Fire-and-forget commands understood by the playback element."""

    def seek(self, target_seconds: float) -> None: ...

    def play(self) -> None: ...

    def pause(self) -> None: ...

    def set_playback_rate(self, rate: float) -> None: ...


__all__ = ["PlayerControls"]
