"""Playback-clock driven subtitle matching and sentence looping."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, FrozenSet, Optional, Sequence, Set, Tuple

from cinelingo import config_manager as cfg
from cinelingo import logging_manager as log_mgr
from cinelingo.services.study_store import PENDING_TRANSLATION, SavedSubtitle, SavedWord, StudyStore
from cinelingo.subtitles.anchors import build_segments, resolve_spans
from cinelingo.subtitles.layers import SubtitleDisplayMode, next_mode, visible_lines
from cinelingo.subtitles.models import AnnotationRecord, LineSegment, Span, SubtitleRecord
from cinelingo.subtitles.timeline import TimelineIndex

from .controls import PlayerControls
from .errors import PlaybackFailure

logger = log_mgr.get_logger().getChild("playback.sync")


@dataclass(frozen=True, slots=True)
class RenderedLine:
    """One language layer of the active cue with its highlights."""

    text: str
    spans: Tuple[Span, ...]
    segments: Tuple[LineSegment, ...]


@dataclass(frozen=True, slots=True)
class SyncSnapshot:
    """Result of evaluating one clock update."""

    clock: float
    record: Optional[SubtitleRecord]
    lines: Tuple[RenderedLine, ...] = field(default_factory=tuple)
    sentence_loop_enabled: bool = False
    seek_target: Optional[float] = None
    failure: Optional[PlaybackFailure] = None


ChangeListener = Callable[[SyncSnapshot], None]
ErrorListener = Callable[[PlaybackFailure], None]


def render_lines(
    record: SubtitleRecord,
    annotations: Sequence[AnnotationRecord],
    mode: SubtitleDisplayMode = SubtitleDisplayMode.DUAL,
) -> Tuple[RenderedLine, ...]:
    """Resolve ``annotations`` against each line of ``record`` that ``mode`` shows."""

    rendered = []
    for line in visible_lines(record.text, mode):
        spans = resolve_spans(line, annotations)
        rendered.append(
            RenderedLine(text=line, spans=tuple(spans), segments=tuple(build_segments(line, spans)))
        )
    return tuple(rendered)


class PlaybackSynchronizer:
    """Map playback-clock updates to the active cue and drive sentence looping.

    Every evaluation depends only on the current clock and the loaded record
    sequence, so seeks and out-of-order updates need no special handling.
    """

    def __init__(
        self,
        controls: PlayerControls,
        *,
        store: Optional[StudyStore] = None,
        on_change: Optional[ChangeListener] = None,
        on_error: Optional[ErrorListener] = None,
        loop_margin_seconds: Optional[float] = None,
        playback_rates: Optional[Sequence[float]] = None,
    ) -> None:
        settings = cfg.get_settings()
        self._controls = controls
        self._store = store
        self._on_change = on_change
        self._on_error = on_error
        self._loop_margin = (
            settings.loop_margin_seconds if loop_margin_seconds is None else loop_margin_seconds
        )
        self._rates: Tuple[float, ...] = tuple(playback_rates or settings.playback_rates)
        self._rate = 1.0 if 1.0 in self._rates else self._rates[0]

        self._index = TimelineIndex(())
        self._video_id: Optional[str] = None
        self._active: Optional[SubtitleRecord] = None
        self._loop_enabled = False
        self._failure: Optional[PlaybackFailure] = None
        self._duration: Optional[float] = None
        self._expanded_cards: Set[str] = set()
        self._display_mode = SubtitleDisplayMode.DUAL
        self._playing = False

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------
    @property
    def records(self) -> Tuple[SubtitleRecord, ...]:
        return self._index.records

    @property
    def video_id(self) -> Optional[str]:
        return self._video_id

    @property
    def active_record(self) -> Optional[SubtitleRecord]:
        return self._active

    @property
    def failure(self) -> Optional[PlaybackFailure]:
        return self._failure

    @property
    def is_halted(self) -> bool:
        return self._failure is not None

    @property
    def duration(self) -> Optional[float]:
        return self._duration

    @property
    def playback_rate(self) -> float:
        return self._rate

    @property
    def sentence_loop_enabled(self) -> bool:
        return self._loop_enabled

    @sentence_loop_enabled.setter
    def sentence_loop_enabled(self, enabled: bool) -> None:
        self._loop_enabled = bool(enabled)
        logger.debug(
            "Sentence loop %s",
            "enabled" if self._loop_enabled else "disabled",
            extra={"event": "playback.loop.toggled", "video_id": self._video_id},
        )

    def toggle_sentence_loop(self) -> bool:
        self.sentence_loop_enabled = not self._loop_enabled
        return self._loop_enabled

    @property
    def display_mode(self) -> SubtitleDisplayMode:
        return self._display_mode

    def cycle_display_mode(self) -> SubtitleDisplayMode:
        """Advance to the next display mode, wrapping to dual after off."""

        self._display_mode = next_mode(self._display_mode)
        return self._display_mode

    @property
    def is_playing(self) -> bool:
        return self._playing

    @property
    def expanded_cards(self) -> FrozenSet[str]:
        return frozenset(self._expanded_cards)

    def toggle_annotation_card(self, annotation_key: str) -> bool:
        """Flip the expanded state of a card shown for the active cue."""

        if annotation_key in self._expanded_cards:
            self._expanded_cards.discard(annotation_key)
            return False
        self._expanded_cards.add(annotation_key)
        return True

    # ------------------------------------------------------------------
    # Document lifecycle
    # ------------------------------------------------------------------
    def load_document(
        self, records: Sequence[SubtitleRecord], *, video_id: Optional[str] = None
    ) -> None:
        """Replace the record sequence and reset all per-video state."""

        self._index = TimelineIndex(records)
        self._video_id = video_id
        self._active = None
        self._loop_enabled = False
        self._failure = None
        self._duration = None
        self._expanded_cards.clear()
        self._playing = False
        logger.info(
            "Loaded %s subtitle records",
            len(self._index),
            extra={"event": "playback.document.loaded", "video_id": video_id},
        )

    # ------------------------------------------------------------------
    # Playback element notifications
    # ------------------------------------------------------------------
    def on_time_update(self, clock: float) -> SyncSnapshot:
        """Evaluate one clock update from the playback element."""

        if self._failure is not None:
            return SyncSnapshot(
                clock=clock,
                record=None,
                sentence_loop_enabled=self._loop_enabled,
                failure=self._failure,
            )

        record = self._index.find_active(clock)
        changed = record != self._active
        self._active = record
        if changed:
            self._expanded_cards.clear()

        seek_target: Optional[float] = None
        if self._loop_enabled and record is not None and clock >= record.end_time - self._loop_margin:
            seek_target = record.start_time
            self._controls.seek(seek_target)
            self._controls.play()
            self._playing = True
            logger.debug(
                "Looping back to %.3f",
                seek_target,
                extra={
                    "event": "playback.loop.seek",
                    "video_id": self._video_id,
                    "subtitle_id": record.id,
                },
            )

        snapshot = SyncSnapshot(
            clock=clock,
            record=record,
            lines=self.render_active(),
            sentence_loop_enabled=self._loop_enabled,
            seek_target=seek_target,
        )
        if changed and self._on_change is not None:
            self._on_change(snapshot)
        return snapshot

    def on_loaded_metadata(self, duration: float) -> None:
        self._duration = max(0.0, float(duration))

    def on_play(self) -> None:
        self._playing = True

    def on_pause(self) -> None:
        self._playing = False

    def on_ended(self) -> None:
        self._playing = False
        logger.debug("Playback ended", extra={"event": "playback.ended", "video_id": self._video_id})

    def on_error(self, reason: str, source_name: Optional[str] = None) -> PlaybackFailure:
        """Record a playback error and halt synchronization until the next load."""

        failure = PlaybackFailure.from_report(reason, source_name)
        self._failure = failure
        self._active = None
        self._loop_enabled = False
        self._playing = False
        logger.warning(
            "Playback failed: %s",
            failure.reason,
            extra={"event": "playback.error", "video_id": self._video_id},
        )
        if self._on_error is not None:
            self._on_error(failure)
        return failure

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------
    def render_active(self) -> Tuple[RenderedLine, ...]:
        """Render the active cue against the annotations currently stored."""

        if self._active is None:
            return ()
        annotations: Sequence[AnnotationRecord] = ()
        if self._store is not None:
            annotations = self._store.annotations_for(self._active.id)
        return render_lines(self._active, annotations, self._display_mode)

    # ------------------------------------------------------------------
    # Player commands
    # ------------------------------------------------------------------
    def toggle_play(self) -> bool:
        """Pause when playing, otherwise resume. Ignored while halted by an error."""

        if self._failure is not None:
            return False
        if self._playing:
            self._controls.pause()
        else:
            self._controls.play()
        self._playing = not self._playing
        return self._playing

    def cycle_playback_rate(self) -> float:
        try:
            position = self._rates.index(self._rate)
        except ValueError:
            position = -1
        self._rate = self._rates[(position + 1) % len(self._rates)]
        self._controls.set_playback_rate(self._rate)
        return self._rate

    def skip(self, clock: float, seconds: float) -> float:
        """Seek ``seconds`` away from ``clock``, clamped to the known media bounds."""

        target = max(0.0, clock + seconds)
        if self._duration is not None:
            target = min(target, self._duration)
        self._controls.seek(target)
        return target

    # ------------------------------------------------------------------
    # Study actions
    # ------------------------------------------------------------------
    def _require_store(self) -> StudyStore:
        if self._store is None:
            raise RuntimeError("No study store is attached to this session.")
        return self._store

    def save_active_subtitle(self) -> Optional[SavedSubtitle]:
        if self._active is None or self._video_id is None:
            return None
        return self._require_store().save_subtitle(self._active, self._video_id)

    def save_word(
        self,
        word: str,
        *,
        translation: str = PENDING_TRANSLATION,
        pronunciation: Optional[str] = None,
    ) -> Optional[SavedWord]:
        if self._active is None or self._video_id is None:
            return None
        return self._require_store().save_word(
            word,
            self._active,
            self._video_id,
            translation=translation,
            pronunciation=pronunciation,
        )


__all__ = [
    "PlaybackSynchronizer",
    "RenderedLine",
    "SyncSnapshot",
    "render_lines",
]
