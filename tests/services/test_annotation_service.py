"""Tests for the annotation generation service."""

from __future__ import annotations

import json
from contextlib import contextmanager
from typing import Any, List, Optional

import pytest

from cinelingo.llm_client import ClientSettings, LLMClient, LLMResponse
from cinelingo.prompt_templates import SOURCE_END, SOURCE_START
from cinelingo.services.annotation_service import (
    AnnotationGenerator,
    annotate_subtitle,
    normalize_annotation_payload,
    parse_json_payload,
)
from cinelingo.services.errors import AnnotationGenerationError
from cinelingo.services.study_store import InMemoryStudyStore
from cinelingo.subtitles.models import AnnotationCategory, SubtitleRecord


def _points_json() -> str:
    return json.dumps(
        {
            "points": [
                {
                    "type": "culture",
                    "anchor": "kicked the bucket",
                    "content": "An idiom meaning someone died.",
                },
                {"type": "grammar", "anchor": "kicked", "content": "Simple past of 'kick'."},
            ]
        }
    )


class _FakeLLMClient:
    """Fake LLM client that returns a configurable response."""

    def __init__(self, response_text: str, error: Optional[str] = None) -> None:
        self.model = "test-model"
        self.response_text = response_text
        self.error = error
        self.last_payload: dict[str, Any] | None = None
        self.last_validator = None

    def send_chat_request(
        self, payload, *, max_attempts=3, timeout=None, validator=None, backoff_seconds=1.0
    ):
        self.last_payload = payload
        self.last_validator = validator
        return LLMResponse(
            text="" if self.error else self.response_text,
            status_code=0 if self.error else 200,
            token_usage={"prompt_eval_count": 10, "eval_count": 50},
            raw={"ok": True},
            error=self.error,
        )

    def close(self) -> None:
        pass


def _fake_client_factory(client: _FakeLLMClient, seen_models: Optional[List[Any]] = None):
    @contextmanager
    def factory(*, model=None, **_kwargs):
        if seen_models is not None:
            seen_models.append(model)
        yield client

    return factory


@pytest.fixture
def record() -> SubtitleRecord:
    return SubtitleRecord(
        id="sub-3_42-5",
        ordinal=4,
        start_time=42.5,
        end_time=45.0,
        text="I kicked the bucket yesterday",
    )


class TestParseJsonPayload:
    def test_plain_json(self) -> None:
        assert parse_json_payload('{"points": []}') == {"points": []}

    def test_code_fence_is_removed(self) -> None:
        text = '```json\n[{"content": "x"}]\n```'

        assert parse_json_payload(text) == [{"content": "x"}]

    def test_prose_around_json(self) -> None:
        text = 'Here you go: {"points": [{"content": "x"}]} Hope that helps!'

        assert parse_json_payload(text) == {"points": [{"content": "x"}]}

    @pytest.mark.parametrize("text", ["", "no json here", "{broken"])
    def test_unparseable_text(self, text: str) -> None:
        assert parse_json_payload(text) is None


class TestNormalizeAnnotationPayload:
    def test_points_object(self) -> None:
        drafts = normalize_annotation_payload(json.loads(_points_json()))

        assert [draft.anchor for draft in drafts] == ["kicked the bucket", "kicked"]
        assert [draft.category for draft in drafts] == [
            AnnotationCategory.CULTURE,
            AnnotationCategory.GRAMMAR,
        ]

    def test_bare_list_and_unknown_category(self) -> None:
        drafts = normalize_annotation_payload(
            [{"type": "Slang", "anchor": " yo ", "content": " greeting "}]
        )

        assert drafts[0].category is AnnotationCategory.CULTURE
        assert drafts[0].anchor == "yo"
        assert drafts[0].content == "greeting"

    def test_entries_without_content_are_dropped(self) -> None:
        drafts = normalize_annotation_payload(
            {"items": [{"anchor": "x"}, "junk", {"content": "kept", "category": "vocabulary"}]}
        )

        assert len(drafts) == 1
        assert drafts[0].anchor == ""
        assert drafts[0].category is AnnotationCategory.VOCABULARY

    def test_single_object_is_accepted(self) -> None:
        assert len(normalize_annotation_payload({"content": "only one"})) == 1

    @pytest.mark.parametrize("payload", [None, 3, {"unrelated": True}])
    def test_unsupported_shapes_raise(self, payload) -> None:
        with pytest.raises(AnnotationGenerationError):
            normalize_annotation_payload(payload)


class TestAnnotationGenerator:
    def test_payload_wraps_line_in_markers(self) -> None:
        client = _FakeLLMClient(_points_json())
        generator = AnnotationGenerator(client_factory=_fake_client_factory(client))

        generator.generate("I kicked the bucket yesterday", "Friends S01E02")

        payload = client.last_payload
        assert payload is not None
        assert payload["model"] == "test-model"
        assert payload["format"] == "json"
        user_message = payload["messages"][-1]["content"]
        assert user_message.startswith(SOURCE_START)
        assert user_message.endswith(SOURCE_END)
        assert "I kicked the bucket yesterday" in user_message
        assert "Friends S01E02" in payload["messages"][0]["content"]

    def test_validator_rejects_prose(self) -> None:
        client = _FakeLLMClient(_points_json())
        generator = AnnotationGenerator(client_factory=_fake_client_factory(client))

        generator.generate("line")

        assert client.last_validator is not None
        assert client.last_validator('{"points": []}')
        assert not client.last_validator("Sorry, I cannot help.")

    def test_model_override_is_forwarded(self) -> None:
        seen: List[Any] = []
        client = _FakeLLMClient(_points_json())
        generator = AnnotationGenerator(
            client_factory=_fake_client_factory(client, seen), model=" custom "
        )

        generator.generate("line")

        assert seen == ["custom"]

    def test_empty_line_is_rejected(self) -> None:
        generator = AnnotationGenerator(client_factory=_fake_client_factory(_FakeLLMClient("")))

        with pytest.raises(ValueError):
            generator.generate("   ")

    def test_client_error_raises(self) -> None:
        client = _FakeLLMClient("", error="HTTP 500")
        generator = AnnotationGenerator(client_factory=_fake_client_factory(client))

        with pytest.raises(AnnotationGenerationError, match="HTTP 500"):
            generator.generate("line")


class TestAnnotateSubtitle:
    def test_success_appends_to_store(self, record: SubtitleRecord) -> None:
        store = InMemoryStudyStore()
        generator = AnnotationGenerator(
            client_factory=_fake_client_factory(_FakeLLMClient(_points_json()))
        )

        attempt = annotate_subtitle(generator, store, record, video_id="video-1")

        assert attempt.succeeded
        assert attempt.error is None
        stored = store.annotations_for(record.id)
        assert stored == attempt.annotations
        assert [annotation.id for annotation in stored] == [
            "ann-sub-3_42-5-0",
            "ann-sub-3_42-5-1",
        ]
        assert all(annotation.video_id == "video-1" for annotation in stored)

    def test_failure_is_contained_and_retryable(self, record: SubtitleRecord) -> None:
        store = InMemoryStudyStore()
        client = _FakeLLMClient("", error="Validation failed")
        generator = AnnotationGenerator(client_factory=_fake_client_factory(client))

        attempt = annotate_subtitle(generator, store, record)

        assert not attempt.succeeded
        assert attempt.error == "Validation failed"
        assert store.annotations_for(record.id) == ()

        client.error = None
        client.response_text = _points_json()
        retry = annotate_subtitle(generator, store, record)

        assert retry.succeeded
        assert len(store.annotations_for(record.id)) == 2


class _ShapeResponse:
    status_code = 200

    def __init__(self, body: Any) -> None:
        self._body = body
        self.text = json.dumps(body)

    def json(self) -> Any:
        return self._body


class _ShapeSession:
    def __init__(self, body: Any) -> None:
        self._body = body

    def post(self, url, *, json=None, headers=None, timeout=None):
        return _ShapeResponse(self._body)

    def close(self) -> None:
        pass


@pytest.mark.parametrize(
    "body",
    [["not", "an", "object"], "plain string", {"message": "flat string"}],
)
def test_malformed_reply_is_a_failed_attempt(record: SubtitleRecord, body: Any) -> None:
    def factory(*, model=None, **_kwargs):
        return LLMClient(
            ClientSettings(model="test-model", api_url="http://llm.test/api/chat"),
            session=_ShapeSession(body),
        )

    store = InMemoryStudyStore()
    generator = AnnotationGenerator(client_factory=factory, max_attempts=1)

    attempt = annotate_subtitle(generator, store, record, video_id="video-1")

    assert attempt.succeeded is False
    assert attempt.error == "Unexpected response shape"
    assert store.annotations_for(record.id) == ()
