"""Playback synchronization between the player clock and subtitles."""

from .controls import PlayerControls
from .errors import PlaybackFailure
from .sync import PlaybackSynchronizer, RenderedLine, SyncSnapshot, render_lines

__all__ = [
    "PlaybackFailure",
    "PlaybackSynchronizer",
    "PlayerControls",
    "RenderedLine",
    "SyncSnapshot",
    "render_lines",
]
