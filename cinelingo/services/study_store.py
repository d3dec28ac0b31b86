"""Annotation and saved-item storage used by the playback session."""

from __future__ import annotations

import threading
import time
import uuid
from dataclasses import dataclass, replace
from typing import Dict, Iterable, List, Optional, Protocol, Tuple

from cinelingo import logging_manager as log_mgr
from cinelingo.subtitles.models import AnnotationRecord, SubtitleRecord

logger = log_mgr.get_logger().getChild("services.study_store")

PENDING_TRANSLATION = "Pending..."


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True, slots=True)
class SavedWord:
    id: str
    word: str
    translation: str
    context_sentence: str
    video_id: str
    timestamp: int
    subtitle_id: Optional[str] = None
    pronunciation: Optional[str] = None
    mastered: bool = False


@dataclass(frozen=True, slots=True)
class SavedSubtitle:
    id: str
    subtitle_id: str
    text: str
    start_time: float
    end_time: float
    video_id: str
    timestamp: int


class StudyStore(Protocol):
    """Read/write access to annotations and saved study items."""

    def annotations_for(self, subtitle_id: str) -> Tuple[AnnotationRecord, ...]: ...

    def add_annotations(
        self, annotations: Iterable[AnnotationRecord]
    ) -> Tuple[AnnotationRecord, ...]: ...

    def save_word(
        self,
        word: str,
        record: SubtitleRecord,
        video_id: str,
        *,
        translation: str = PENDING_TRANSLATION,
        pronunciation: Optional[str] = None,
    ) -> SavedWord: ...

    def remove_word(self, word_id: str) -> bool: ...

    def toggle_mastered(self, word_id: str) -> Optional[SavedWord]: ...

    def save_subtitle(self, record: SubtitleRecord, video_id: str) -> SavedSubtitle: ...

    def unsave_subtitle(self, subtitle_id: str, video_id: str) -> bool: ...

    def is_subtitle_saved(self, subtitle_id: str, video_id: str) -> bool: ...

    def saved_words(self) -> Tuple[SavedWord, ...]: ...

    def saved_subtitles(self) -> Tuple[SavedSubtitle, ...]: ...


class InMemoryStudyStore:
    """Thread-safe :class:`StudyStore` kept in process memory.

    Annotations may be appended by a background generator while the playback
    loop reads them, so every accessor returns a snapshot taken under the lock.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._annotations: Dict[str, List[AnnotationRecord]] = {}
        self._words: Dict[str, SavedWord] = {}
        self._subtitles: Dict[Tuple[str, str], SavedSubtitle] = {}

    # ------------------------------------------------------------------
    # Annotations
    # ------------------------------------------------------------------
    def annotations_for(self, subtitle_id: str) -> Tuple[AnnotationRecord, ...]:
        with self._lock:
            return tuple(self._annotations.get(subtitle_id, ()))

    def add_annotations(
        self, annotations: Iterable[AnnotationRecord]
    ) -> Tuple[AnnotationRecord, ...]:
        stored: List[AnnotationRecord] = []
        with self._lock:
            for annotation in annotations:
                bucket = self._annotations.setdefault(annotation.subtitle_id, [])
                if not annotation.id:
                    annotation = replace(
                        annotation, id=f"ann-{annotation.subtitle_id}-{len(bucket)}"
                    )
                if not annotation.created_at:
                    annotation = replace(annotation, created_at=time.time())
                bucket.append(annotation)
                stored.append(annotation)
        return tuple(stored)

    # ------------------------------------------------------------------
    # Saved words
    # ------------------------------------------------------------------
    def save_word(
        self,
        word: str,
        record: SubtitleRecord,
        video_id: str,
        *,
        translation: str = PENDING_TRANSLATION,
        pronunciation: Optional[str] = None,
    ) -> SavedWord:
        cleaned = (word or "").strip()
        if not cleaned:
            raise ValueError("Word cannot be empty.")
        saved = SavedWord(
            id=f"word-{uuid.uuid4().hex}",
            word=cleaned,
            translation=translation,
            context_sentence=record.text,
            video_id=video_id,
            timestamp=_now_ms(),
            subtitle_id=record.id,
            pronunciation=pronunciation,
        )
        with self._lock:
            self._words[saved.id] = saved
        logger.info(
            "Saved word %r",
            cleaned,
            extra={"event": "store.word.saved", "video_id": video_id, "subtitle_id": record.id},
        )
        return saved

    def remove_word(self, word_id: str) -> bool:
        with self._lock:
            return self._words.pop(word_id, None) is not None

    def toggle_mastered(self, word_id: str) -> Optional[SavedWord]:
        with self._lock:
            current = self._words.get(word_id)
            if current is None:
                return None
            updated = replace(current, mastered=not current.mastered)
            self._words[word_id] = updated
            return updated

    def saved_words(self) -> Tuple[SavedWord, ...]:
        with self._lock:
            return tuple(self._words.values())

    # ------------------------------------------------------------------
    # Saved subtitles
    # ------------------------------------------------------------------
    def save_subtitle(self, record: SubtitleRecord, video_id: str) -> SavedSubtitle:
        key = (video_id, record.id)
        with self._lock:
            existing = self._subtitles.get(key)
            if existing is not None:
                return existing
            saved = SavedSubtitle(
                id=f"saved-sub-{uuid.uuid4().hex}",
                subtitle_id=record.id,
                text=record.text,
                start_time=record.start_time,
                end_time=record.end_time,
                video_id=video_id,
                timestamp=_now_ms(),
            )
            self._subtitles[key] = saved
        logger.info(
            "Saved subtitle",
            extra={"event": "store.subtitle.saved", "video_id": video_id, "subtitle_id": record.id},
        )
        return saved

    def unsave_subtitle(self, subtitle_id: str, video_id: str) -> bool:
        with self._lock:
            return self._subtitles.pop((video_id, subtitle_id), None) is not None

    def is_subtitle_saved(self, subtitle_id: str, video_id: str) -> bool:
        with self._lock:
            return (video_id, subtitle_id) in self._subtitles

    def saved_subtitles(self) -> Tuple[SavedSubtitle, ...]:
        with self._lock:
            return tuple(self._subtitles.values())


__all__ = [
    "InMemoryStudyStore",
    "PENDING_TRANSLATION",
    "SavedSubtitle",
    "SavedWord",
    "StudyStore",
]
