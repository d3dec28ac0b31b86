"""Selection of the language layers shown for a multi-line cue."""

from __future__ import annotations

from enum import Enum
from typing import List

import regex

_CJK_PATTERN = regex.compile(r"[\u4e00-\u9fa5]")


class SubtitleDisplayMode(str, Enum):
    DUAL = "dual"
    ORIGINAL = "original"
    TRANSLATION = "translation"
    OFF = "off"


_MODE_CYCLE = (
    SubtitleDisplayMode.DUAL,
    SubtitleDisplayMode.ORIGINAL,
    SubtitleDisplayMode.TRANSLATION,
    SubtitleDisplayMode.OFF,
)


def next_mode(mode: SubtitleDisplayMode) -> SubtitleDisplayMode:
    position = _MODE_CYCLE.index(mode)
    return _MODE_CYCLE[(position + 1) % len(_MODE_CYCLE)]


def is_translation_line(line: str) -> bool:
    """Return True when ``line`` contains CJK ideographs."""

    return bool(_CJK_PATTERN.search(line))


def visible_lines(text: str, mode: SubtitleDisplayMode) -> List[str]:
    """Return the lines of ``text`` that ``mode`` displays, in order."""

    if mode is SubtitleDisplayMode.OFF or not text:
        return []
    lines = text.split("\n")
    if mode is SubtitleDisplayMode.DUAL:
        return lines
    want_translation = mode is SubtitleDisplayMode.TRANSLATION
    return [line for line in lines if is_translation_line(line) == want_translation]


__all__ = ["SubtitleDisplayMode", "is_translation_line", "next_mode", "visible_lines"]
