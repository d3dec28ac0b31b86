"""Subtitle decoding, time lookup and annotation anchoring."""

from .anchors import build_segments, resolve_spans
from .decoder import decode, load_subtitle_records
from .errors import SubtitleDecodeError
from .layers import SubtitleDisplayMode, visible_lines
from .models import (
    AnnotationCategory,
    AnnotationRecord,
    LineSegment,
    Span,
    SubtitleRecord,
)
from .timeline import TimelineIndex, find_active

__all__ = [
    "AnnotationCategory",
    "AnnotationRecord",
    "LineSegment",
    "Span",
    "SubtitleDecodeError",
    "SubtitleDisplayMode",
    "SubtitleRecord",
    "TimelineIndex",
    "build_segments",
    "decode",
    "find_active",
    "load_subtitle_records",
    "resolve_spans",
    "visible_lines",
]
