"""SubRip document decoding into immutable subtitle records."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from .common import (
    BLOCK_SEPARATOR_PATTERN,
    MIN_BLOCK_LINES,
    SRT_TIMECODE_PATTERN,
    SUBTITLE_ID_DECIMAL_SEPARATOR,
    SUBTITLE_ID_PREFIX,
    logger,
)
from .errors import SubtitleDecodeError
from .models import SubtitleRecord
from .text import (
    clean_subtitle_line,
    format_seconds_token,
    normalize_line_endings,
    strip_byte_order_mark,
)

_VOBSUB_HEADERS = (b"\x00\x00\x01\xba", b"\x00\x00\x01\xb3")


def timestamp_to_seconds(value: str) -> float:
    """Convert ``HH:MM:SS,mmm`` into seconds."""

    clock, _, millis = value.strip().partition(",")
    parts = clock.split(":")
    if len(parts) != 3 or not millis:
        raise ValueError(f"Invalid timestamp: {value!r}")
    hours, minutes, seconds = (int(part) for part in parts)
    return hours * 3600 + minutes * 60 + seconds + int(millis) / 1000


def build_subtitle_id(block_index: int, start_time: float) -> str:
    """Return the stable identifier for the cue at ``block_index``."""

    token = format_seconds_token(start_time).replace(".", SUBTITLE_ID_DECIMAL_SEPARATOR, 1)
    return f"{SUBTITLE_ID_PREFIX}{block_index}_{token}"


def split_blocks(raw_text: str) -> List[str]:
    """Return candidate cue blocks separated by blank lines."""

    normalized = normalize_line_endings(strip_byte_order_mark(raw_text or "")).strip()
    if not normalized:
        return []
    return BLOCK_SEPARATOR_PATTERN.split(normalized)


def _decode_block(block_index: int, block: str) -> Optional[SubtitleRecord]:
    lines = block.split("\n")
    if len(lines) < MIN_BLOCK_LINES:
        return None

    match = SRT_TIMECODE_PATTERN.search(lines[1])
    if match is None:
        return None

    text = "\n".join(
        cleaned for cleaned in (clean_subtitle_line(line) for line in lines[2:]) if cleaned
    )
    if not text:
        return None

    start_time = timestamp_to_seconds(match.group("start"))
    return SubtitleRecord(
        id=build_subtitle_id(block_index, start_time),
        ordinal=block_index + 1,
        start_time=start_time,
        end_time=timestamp_to_seconds(match.group("end")),
        text=text,
    )


def decode(raw_text: str) -> List[SubtitleRecord]:
    """Parse a SubRip document into subtitle records.

    Malformed blocks are skipped rather than reported: a block shorter than
    three lines, a block whose second line carries no timecode, and a block
    whose text is empty once markup is removed all produce no record. Ids use
    the block's position among all blocks, so dropping one cue never shifts
    the ids of the others.
    """

    records: List[SubtitleRecord] = []
    blocks = split_blocks(raw_text)
    for block_index, block in enumerate(blocks):
        record = _decode_block(block_index, block)
        if record is None:
            logger.debug(
                "Skipping malformed subtitle block %s",
                block_index,
                extra={"event": "subtitles.block.dropped"},
            )
            continue
        if record.end_time <= record.start_time:
            logger.debug(
                "Subtitle %s ends at or before its start",
                record.id,
                extra={"event": "subtitles.block.inverted", "subtitle_id": record.id},
            )
        records.append(record)

    logger.debug(
        "Decoded %s subtitle records from %s blocks",
        len(records),
        len(blocks),
        extra={"event": "subtitles.decoded"},
    )
    return records


def _read_subtitle_text(path: Path) -> str:
    """Return subtitle text with defensive decoding and binary detection."""

    raw = path.read_bytes()
    if path.suffix.lower() == ".sub" and raw[:4] in _VOBSUB_HEADERS:
        raise SubtitleDecodeError(
            "Binary .sub (VobSub) subtitles are not supported. Please convert to SRT."
        )

    for encoding in ("utf-8", "utf-8-sig", "latin-1"):
        try:
            return raw.decode(encoding)
        except UnicodeDecodeError:
            continue

    raise SubtitleDecodeError(f"Unable to decode subtitle file '{path}'.")


def load_subtitle_records(path: Path | str) -> List[SubtitleRecord]:
    """Read ``path`` from disk and decode it."""

    resolved = Path(path)
    try:
        payload = _read_subtitle_text(resolved)
    except OSError as exc:
        raise SubtitleDecodeError(f"Unable to read subtitle file '{resolved}': {exc}") from exc
    records = decode(payload)
    logger.info(
        "Loaded %s subtitles from %s",
        len(records),
        resolved.name,
        extra={"event": "subtitles.loaded"},
    )
    return records


__all__ = [
    "build_subtitle_id",
    "decode",
    "load_subtitle_records",
    "split_blocks",
    "timestamp_to_seconds",
]
