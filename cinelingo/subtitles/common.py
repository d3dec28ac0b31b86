"""Shared constants and logger used across subtitle modules."""

from __future__ import annotations

import re

from cinelingo import logging_manager as log_mgr

logger = log_mgr.get_logger().getChild("subtitles")

SRT_TIMECODE_PATTERN = re.compile(
    r"(?P<start>\d{2}:\d{2}:\d{2},\d{3}) --> (?P<end>\d{2}:\d{2}:\d{2},\d{3})"
)
BLOCK_SEPARATOR_PATTERN = re.compile(r"\n{2,}")

SUBTITLE_ID_PREFIX = "sub-"
SUBTITLE_ID_DECIMAL_SEPARATOR = "-"

MIN_BLOCK_LINES = 3

__all__ = [
    "BLOCK_SEPARATOR_PATTERN",
    "MIN_BLOCK_LINES",
    "SRT_TIMECODE_PATTERN",
    "SUBTITLE_ID_DECIMAL_SEPARATOR",
    "SUBTITLE_ID_PREFIX",
    "logger",
]
