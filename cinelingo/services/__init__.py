"""Collaborators consumed by the playback session."""

from .annotation_service import (
    AnnotationAttempt,
    AnnotationDraft,
    AnnotationGenerator,
    annotate_subtitle,
)
from .errors import AnnotationGenerationError
from .study_store import InMemoryStudyStore, SavedSubtitle, SavedWord, StudyStore

__all__ = [
    "AnnotationAttempt",
    "AnnotationDraft",
    "AnnotationGenerationError",
    "AnnotationGenerator",
    "InMemoryStudyStore",
    "SavedSubtitle",
    "SavedWord",
    "StudyStore",
    "annotate_subtitle",
]
