"""LLM-backed generation of vocabulary, grammar and culture notes."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Callable, List, Mapping, Optional, Sequence, Tuple

from cinelingo import config_manager as cfg
from cinelingo import logging_manager as log_mgr
from cinelingo import prompt_templates
from cinelingo.llm_client import LLMClient, LLMResponse, create_client
from cinelingo.subtitles.models import AnnotationCategory, AnnotationRecord, SubtitleRecord

from .errors import AnnotationGenerationError
from .study_store import StudyStore

logger = log_mgr.get_logger().getChild("services.annotations")

ClientFactory = Callable[..., LLMClient]

_LIST_KEYS = ("points", "items", "annotations", "results")


@dataclass(frozen=True, slots=True)
class AnnotationDraft:
    """Normalized learning point returned by the generator."""

    anchor: str
    category: AnnotationCategory
    content: str

    def to_record(
        self, subtitle_id: str, *, video_id: Optional[str] = None
    ) -> AnnotationRecord:
        return AnnotationRecord(
            subtitle_id=subtitle_id,
            anchor=self.anchor,
            category=self.category,
            content=self.content,
            video_id=video_id,
        )


@dataclass(slots=True)
class AnnotationAttempt:
    """Outcome of generating annotations for one subtitle line."""

    subtitle_id: str
    succeeded: bool
    annotations: Tuple[AnnotationRecord, ...] = field(default_factory=tuple)
    error: Optional[str] = None


def _strip_code_fence(text: str) -> str:
    stripped = text.strip()
    if not stripped.startswith("```"):
        return stripped
    lines = stripped.splitlines()
    if len(lines) < 2:
        return stripped
    if lines[-1].strip().startswith("```"):
        return "\n".join(lines[1:-1]).strip()
    return stripped


def _extract_json_block(text: str) -> Optional[str]:
    start_candidates = [idx for idx in (text.find("{"), text.find("[")) if idx != -1]
    if not start_candidates:
        return None
    start = min(start_candidates)
    end = max(text.rfind("}"), text.rfind("]"))
    if end <= start:
        return None
    return text[start : end + 1].strip()


def parse_json_payload(text: str) -> Optional[Any]:
    """Return a JSON payload parsed from ``text`` when possible."""

    if not text:
        return None
    candidates = [text.strip(), _strip_code_fence(text)]
    extracted = _extract_json_block(text)
    if extracted:
        candidates.append(extracted)
    for candidate in candidates:
        if not candidate:
            continue
        try:
            return json.loads(candidate)
        except json.JSONDecodeError:
            continue
    return None


def _coerce_entries(payload: Any) -> Optional[Sequence[Any]]:
    if isinstance(payload, list):
        return payload
    if isinstance(payload, Mapping):
        for key in _LIST_KEYS:
            value = payload.get(key)
            if isinstance(value, list):
                return value
        if "content" in payload:
            return [payload]
    return None


def _text_field(entry: Mapping[str, Any], key: str) -> str:
    value = entry.get(key)
    return value.strip() if isinstance(value, str) else ""


def normalize_annotation_payload(payload: Any) -> List[AnnotationDraft]:
    """Convert loosely-shaped generator output into :class:`AnnotationDraft` items.

    Entries without content are dropped. Unknown categories become
    ``culture``. A missing anchor is kept as an empty string, which makes the
    note valid but never highlighted.
    """

    entries = _coerce_entries(payload)
    if entries is None:
        raise AnnotationGenerationError("Generator output is not a list of annotations.")

    drafts: List[AnnotationDraft] = []
    for entry in entries:
        if not isinstance(entry, Mapping):
            continue
        content = _text_field(entry, "content")
        if not content:
            continue
        drafts.append(
            AnnotationDraft(
                anchor=_text_field(entry, "anchor"),
                category=AnnotationCategory.coerce(entry.get("type") or entry.get("category")),
                content=content,
            )
        )
    return drafts


class AnnotationGenerator:
    """Ask the configured LLM for learning points about a subtitle line."""

    def __init__(
        self,
        *,
        client_factory: ClientFactory = create_client,
        model: Optional[str] = None,
        timeout_seconds: Optional[int] = None,
        max_attempts: Optional[int] = None,
    ) -> None:
        settings = cfg.get_settings()
        self._client_factory = client_factory
        self._model = (model or "").strip() or None
        self._timeout_seconds = timeout_seconds or settings.llm_timeout_seconds
        self._max_attempts = max_attempts or settings.llm_max_attempts

    def generate(self, line_text: str, context: Optional[str] = None) -> List[AnnotationDraft]:
        text = (line_text or "").strip()
        if not text:
            raise ValueError("Subtitle text cannot be empty.")
        resolved_context = (context or "").strip() or cfg.get_settings().annotation_context

        with self._client_factory(model=self._model) as client:
            payload = prompt_templates.make_annotation_payload(
                text, context=resolved_context, model=client.model
            )
            response: LLMResponse = client.send_chat_request(
                payload,
                max_attempts=self._max_attempts,
                timeout=self._timeout_seconds,
                validator=lambda candidate: parse_json_payload(candidate) is not None,
            )

        if response.error:
            raise AnnotationGenerationError(response.error)
        parsed = parse_json_payload(response.text)
        if parsed is None:
            raise AnnotationGenerationError("Generator returned unparseable output.")
        return normalize_annotation_payload(parsed)


def annotate_subtitle(
    generator: AnnotationGenerator,
    store: StudyStore,
    record: SubtitleRecord,
    *,
    video_id: Optional[str] = None,
    context: Optional[str] = None,
) -> AnnotationAttempt:
    """Generate notes for ``record`` and append them to ``store``.

    Failures are returned as an unsuccessful attempt for this line only;
    calling again with the same record retries.
    """

    with log_mgr.log_context(subtitle_id=record.id, video_id=video_id):
        try:
            drafts = generator.generate(record.text, context)
        except AnnotationGenerationError as exc:
            logger.warning(
                "Annotation generation failed: %s",
                exc,
                extra={"event": "annotations.failed"},
            )
            return AnnotationAttempt(subtitle_id=record.id, succeeded=False, error=str(exc))

        stored = store.add_annotations(
            draft.to_record(record.id, video_id=video_id) for draft in drafts
        )
        logger.info(
            "Stored %s annotations",
            len(stored),
            extra={"event": "annotations.stored"},
        )
    return AnnotationAttempt(subtitle_id=record.id, succeeded=True, annotations=stored)


__all__ = [
    "AnnotationAttempt",
    "AnnotationDraft",
    "AnnotationGenerator",
    "annotate_subtitle",
    "normalize_annotation_payload",
    "parse_json_payload",
]
