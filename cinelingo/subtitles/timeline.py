"""Time-based lookup of the subtitle active at a playback position."""

from __future__ import annotations

from bisect import bisect_left, bisect_right
from typing import Dict, List, Optional, Sequence

from .models import SubtitleRecord


def find_active(records: Sequence[SubtitleRecord], time: float) -> Optional[SubtitleRecord]:
    """Return the first record whose interval contains ``time``.

    Both boundaries are inclusive. Overlapping records resolve to the one that
    appears first in ``records``.
    """

    for record in records:
        if record.contains(time):
            return record
    return None


class TimelineIndex:
    """Logarithmic ``find_active`` over a start-ordered record sequence.

    ``_max_ends[i]`` holds the largest end time among ``records[:i + 1]``. The
    first position where it reaches ``time`` is also the first record, in
    sequence order, whose own end reaches ``time``; that record is active when
    its start is not after ``time``. Sequences whose start times are out of
    order fall back to :func:`find_active`.
    """

    def __init__(self, records: Sequence[SubtitleRecord]) -> None:
        self._records: tuple[SubtitleRecord, ...] = tuple(records)
        self._starts: List[float] = [record.start_time for record in self._records]
        self._max_ends: List[float] = []
        running = float("-inf")
        for record in self._records:
            running = max(running, record.end_time)
            self._max_ends.append(running)
        self._ordered = all(
            earlier <= later for earlier, later in zip(self._starts, self._starts[1:])
        )
        self._positions: Dict[str, int] = {}
        for position, record in enumerate(self._records):
            self._positions.setdefault(record.id, position)

    @property
    def records(self) -> tuple[SubtitleRecord, ...]:
        return self._records

    @property
    def is_ordered(self) -> bool:
        return self._ordered

    def __len__(self) -> int:
        return len(self._records)

    def __bool__(self) -> bool:
        return bool(self._records)

    def index_of(self, record_id: str) -> Optional[int]:
        return self._positions.get(record_id)

    def find_active(self, time: float) -> Optional[SubtitleRecord]:
        if not self._ordered:
            return find_active(self._records, time)
        started = bisect_right(self._starts, time)
        if started == 0:
            return None
        position = bisect_left(self._max_ends, time, 0, started)
        if position < started:
            return self._records[position]
        return None


__all__ = ["TimelineIndex", "find_active"]
