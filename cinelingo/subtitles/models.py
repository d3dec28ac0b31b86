"""Typed containers for decoded subtitles and their annotations."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple


@dataclass(frozen=True, slots=True)
class SubtitleRecord:
    """Immutable cue produced by the decoder.

    ``id`` is derived from the cue's block position and start time, so the same
    document always yields the same ids.
    """

    id: str
    ordinal: int
    start_time: float
    end_time: float
    text: str

    @property
    def lines(self) -> Tuple[str, ...]:
        return tuple(self.text.split("\n"))

    def contains(self, time: float) -> bool:
        """Return True when ``time`` lies inside the cue, both ends inclusive."""

        return self.start_time <= time <= self.end_time


class AnnotationCategory(str, Enum):
    """Presentation category of an annotation."""

    VOCABULARY = "vocabulary"
    GRAMMAR = "grammar"
    CULTURE = "culture"

    @classmethod
    def coerce(cls, value: object, default: "AnnotationCategory | None" = None) -> "AnnotationCategory":
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            normalized = value.strip().lower()
            for member in cls:
                if member.value == normalized:
                    return member
        return default or cls.CULTURE


@dataclass(frozen=True, slots=True)
class AnnotationRecord:
    """Learning note attached to a subtitle through a text anchor."""

    subtitle_id: str
    anchor: str
    category: AnnotationCategory
    content: str = ""
    id: str = ""
    video_id: Optional[str] = None
    created_at: float = 0.0


@dataclass(frozen=True, slots=True)
class Span:
    """Highlighted range of a line, in UTF-16 code units."""

    start: int
    end: int
    category: AnnotationCategory
    annotation: Optional[AnnotationRecord] = None


@dataclass(frozen=True, slots=True)
class LineSegment:
    """Contiguous piece of a rendered line.

    Plain segments have no category and expose their ``words`` as click
    targets; tagged segments carry the annotation they highlight.
    """

    text: str
    category: Optional[AnnotationCategory] = None
    annotation: Optional[AnnotationRecord] = None
    words: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def is_tagged(self) -> bool:
        return self.category is not None


__all__ = [
    "AnnotationCategory",
    "AnnotationRecord",
    "LineSegment",
    "Span",
    "SubtitleRecord",
]
