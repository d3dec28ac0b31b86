import os
import tempfile
from typing import List, Tuple

os.environ.setdefault("CINELINGO_LOG_DIR", tempfile.mkdtemp(prefix="cinelingo-logs-"))

import pytest

from cinelingo import config_manager as cfg
from cinelingo.subtitles.models import AnnotationCategory, AnnotationRecord

_ENV_KEYS = (
    "CINELINGO_LLM_URL",
    "CINELINGO_LLM_MODEL",
    "CINELINGO_LLM_API_KEY",
    "CINELINGO_LLM_TIMEOUT_SECONDS",
    "CINELINGO_DEBUG",
    "OLLAMA_URL",
    "OLLAMA_API_KEY",
)


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch):
    """Start every test from file defaults without ambient overrides."""

    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    cfg.reset_settings()
    yield
    cfg.reset_settings()


class RecordingControls:
    """Player double that records the commands it receives."""

    def __init__(self) -> None:
        self.calls: List[Tuple[str, object]] = []

    def seek(self, target_seconds: float) -> None:
        self.calls.append(("seek", target_seconds))

    def play(self) -> None:
        self.calls.append(("play", None))

    def pause(self) -> None:
        self.calls.append(("pause", None))

    def set_playback_rate(self, rate: float) -> None:
        self.calls.append(("rate", rate))

    @property
    def seeks(self) -> List[float]:
        return [value for name, value in self.calls if name == "seek"]


@pytest.fixture
def controls() -> RecordingControls:
    return RecordingControls()


@pytest.fixture
def make_annotation():
    def _make(
        anchor: str,
        category: AnnotationCategory = AnnotationCategory.VOCABULARY,
        subtitle_id: str = "sub-0_1",
        content: str = "note",
    ) -> AnnotationRecord:
        return AnnotationRecord(
            subtitle_id=subtitle_id, anchor=anchor, category=category, content=content
        )

    return _make


SAMPLE_SRT = (
    "1\n00:00:01,000 --> 00:00:03,000\nHello\n你好\n\n"
    "2\n00:00:05,000 --> 00:00:07,000\nBye\n"
)


@pytest.fixture
def sample_srt() -> str:
    return SAMPLE_SRT
