"""Show, season and episode hints parsed from a media display name."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional

from cinelingo import logging_manager as log_mgr

logger = log_mgr.get_logger().getChild("media.filename_metadata")

_EXTENSION_PATTERN = re.compile(r"\.[^/.]+$")
_SEASON_EPISODE_PATTERN = re.compile(r"(.*?)[ ._]S(\d+)E?\s*(\d+)", re.IGNORECASE)
_CROSS_PATTERN = re.compile(r"(.*?)[ ._](\d+)x(\d+)", re.IGNORECASE)
_SEPARATOR_PATTERN = re.compile(r"[._]")


@dataclass(frozen=True, slots=True)
class FilenameMetadata:
    """Best-effort classification of an imported file name."""

    show_name: str
    season: Optional[str] = None
    episode: Optional[str] = None

    @property
    def has_episode(self) -> bool:
        return self.season is not None and self.episode is not None

    def folder_path(self) -> List[str]:
        """Return the folder hierarchy an import should be routed into."""

        path = [self.show_name]
        if self.season:
            path.append(self.season)
        return path


def _clean_show_name(value: str) -> str:
    return _SEPARATOR_PATTERN.sub(" ", value).strip()


def _pad(prefix: str, digits: str) -> str:
    return f"{prefix}{digits.strip().rjust(2, '0')}"


def extract(display_name: str) -> FilenameMetadata:
    """Parse ``display_name`` into show/season/episode hints.

    ``Show.Name.S01E02.mkv`` and ``Show Name 1x02.srt`` both yield
    ``FilenameMetadata("Show Name", "S01", "E02")``. Anything else keeps the
    extension-stripped name as the show name.
    """

    clean_name = _EXTENSION_PATTERN.sub("", display_name or "")

    for pattern in (_SEASON_EPISODE_PATTERN, _CROSS_PATTERN):
        match = pattern.search(clean_name)
        if match is None:
            continue
        metadata = FilenameMetadata(
            show_name=_clean_show_name(match.group(1)),
            season=_pad("S", match.group(2)),
            episode=_pad("E", match.group(3)),
        )
        logger.debug(
            "Recognised %s as %s %s%s",
            display_name,
            metadata.show_name,
            metadata.season,
            metadata.episode,
            extra={"event": "media.filename.parsed"},
        )
        return metadata

    return FilenameMetadata(show_name=clean_name)


__all__ = ["FilenameMetadata", "extract"]
