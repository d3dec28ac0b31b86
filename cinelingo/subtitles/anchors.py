"""Resolve annotation anchors into highlighted spans of a subtitle line."""

from __future__ import annotations

from typing import Iterable, List, Sequence, Tuple

import regex

from .common import logger
from .models import AnnotationRecord, LineSegment, Span

_WORD_PATTERN = regex.compile(r"[\p{L}\p{M}\p{N}'’-]+")


def _fold(value: str) -> str:
    """Lower-case ``value`` one character at a time so indices stay aligned."""

    folded = []
    for char in value:
        lowered = char.lower()
        folded.append(lowered if len(lowered) == 1 else char)
    return "".join(folded)


def utf16_offset(text: str, index: int) -> int:
    """Convert a code-point ``index`` into ``text`` to a UTF-16 offset."""

    return index + sum(1 for char in text[:index] if ord(char) > 0xFFFF)


def codepoint_index(text: str, offset: int) -> int:
    """Convert a UTF-16 ``offset`` into ``text`` to a code-point index."""

    units = 0
    for index, char in enumerate(text):
        if units >= offset:
            return index
        units += 2 if ord(char) > 0xFFFF else 1
    return len(text)


def _candidate_spans(line_text: str, annotations: Iterable[AnnotationRecord]) -> List[Span]:
    folded_line = _fold(line_text)
    candidates: List[Span] = []
    for annotation in annotations:
        anchor = annotation.anchor or ""
        if not anchor:
            continue
        index = folded_line.find(_fold(anchor))
        if index < 0:
            logger.debug(
                "Anchor %r not present in line",
                anchor,
                extra={"event": "anchors.miss", "subtitle_id": annotation.subtitle_id},
            )
            continue
        start = utf16_offset(line_text, index)
        end = utf16_offset(line_text, index + len(anchor))
        candidates.append(Span(start, end, annotation.category, annotation))
    return candidates


def resolve_spans(line_text: str, annotations: Sequence[AnnotationRecord]) -> List[Span]:
    """Return non-overlapping highlight spans for ``annotations`` in ``line_text``.

    Only the first case-insensitive occurrence of each anchor is considered.
    Candidates are ordered by start offset and a span that begins before the
    previous kept span ends is discarded, so the earlier-starting annotation
    always wins a collision. Offsets are UTF-16 code units.
    """

    kept: List[Span] = []
    last_end = 0
    for span in sorted(_candidate_spans(line_text, annotations), key=lambda item: item.start):
        if span.start >= last_end:
            kept.append(span)
            last_end = span.end
    return kept


def split_words(text: str) -> Tuple[str, ...]:
    return tuple(match.group(0) for match in _WORD_PATTERN.finditer(text))


def build_segments(line_text: str, spans: Sequence[Span]) -> List[LineSegment]:
    """Split ``line_text`` into alternating plain and highlighted segments."""

    segments: List[LineSegment] = []
    cursor = 0
    for span in spans:
        start = codepoint_index(line_text, span.start)
        end = codepoint_index(line_text, span.end)
        if start > cursor:
            plain = line_text[cursor:start]
            segments.append(LineSegment(text=plain, words=split_words(plain)))
        segments.append(
            LineSegment(
                text=line_text[start:end],
                category=span.category,
                annotation=span.annotation,
            )
        )
        cursor = end
    if cursor < len(line_text):
        plain = line_text[cursor:]
        segments.append(LineSegment(text=plain, words=split_words(plain)))
    return segments


__all__ = [
    "build_segments",
    "codepoint_index",
    "resolve_spans",
    "split_words",
    "utf16_offset",
]
