"""Blocking client for Ollama-compatible chat endpoints used by annotation generation."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping, Optional

import requests

from cinelingo import config_manager as cfg
from cinelingo import logging_manager as log_mgr

logger = log_mgr.get_logger().getChild("llm_client")

TokenUsage = Dict[str, int]
Validator = Callable[[str], bool]

DEFAULT_REQUEST_TIMEOUT = 90
UNEXPECTED_SHAPE_ERROR = "Unexpected response shape"
_USAGE_KEYS = ("prompt_eval_count", "eval_count")


@dataclass(frozen=True)
class ClientSettings:
    """Connection parameters for an :class:`LLMClient`."""

    model: str = cfg.DEFAULT_MODEL
    api_url: Optional[str] = None
    api_key: Optional[str] = None
    debug: bool = False

    def resolve_api_url(self) -> str:
        return self.api_url or cfg.get_llm_url()

    def headers(self) -> Optional[Dict[str, str]]:
        if not self.api_key:
            return None
        return {"Authorization": f"Bearer {self.api_key}"}


@dataclass
class LLMResponse:
    """Outcome of a chat request. ``error`` is set whenever ``text`` is unusable."""

    text: str
    status_code: int
    token_usage: TokenUsage = field(default_factory=dict)
    raw: Optional[Any] = None
    error: Optional[str] = None


def _failed(status_code: int, error: str, raw: Any = None) -> LLMResponse:
    return LLMResponse(text="", status_code=status_code, raw=raw, error=error)


def extract_message_text(data: Any) -> Optional[str]:
    """Return the assistant text carried by a chat or generate reply body.

    Chat replies put it under ``message.content``, generate replies under
    ``response``. ``None`` means the body has neither shape.
    """

    if not isinstance(data, Mapping):
        return None
    message = data.get("message")
    content = message.get("content") if isinstance(message, Mapping) else None
    if isinstance(content, str) and content:
        return content
    response = data.get("response")
    if isinstance(response, str):
        return response
    return content if isinstance(content, str) else None


def extract_token_usage(data: Mapping[str, Any]) -> TokenUsage:
    return {key: data[key] for key in _USAGE_KEYS if isinstance(data.get(key), int)}


class LLMClient:
    """Issue non-streaming chat requests and retry unusable replies."""

    def __init__(
        self,
        settings: Optional[ClientSettings] = None,
        *,
        session: Optional[requests.Session] = None,
    ) -> None:
        self._settings = settings or ClientSettings()
        self._session = session or requests.Session()

    @property
    def settings(self) -> ClientSettings:
        return self._settings

    @property
    def model(self) -> str:
        return self._settings.model

    @property
    def api_url(self) -> str:
        return self._settings.resolve_api_url()

    def _post(self, payload: Dict[str, Any], timeout: int) -> LLMResponse:
        response = self._session.post(
            self.api_url,
            json=payload,
            headers=self._settings.headers(),
            timeout=timeout,
        )
        status = response.status_code
        if status != 200:
            preview = response.text[:300]
            return _failed(status, f"HTTP {status}: {preview}" if preview else f"HTTP {status}", response.text)

        try:
            data = response.json()
        except ValueError as exc:
            return _failed(status, f"Invalid JSON response: {exc}", response.text)

        text = extract_message_text(data)
        if text is None:
            return _failed(status, UNEXPECTED_SHAPE_ERROR, data)

        usage = extract_token_usage(data)
        if self._settings.debug and usage:
            logger.debug(
                "Token usage - prompt: %s, completion: %s",
                usage.get("prompt_eval_count", 0),
                usage.get("eval_count", 0),
                extra={"event": "llm.usage"},
            )
        return LLMResponse(text=text, status_code=status, token_usage=usage, raw=data)

    @staticmethod
    def _rejection(text: str, validator: Optional[Validator]) -> Optional[str]:
        if not text:
            return "Empty response"
        if validator is not None and not validator(text):
            return "Validation failed"
        return None

    def send_chat_request(
        self,
        payload: Dict[str, Any],
        *,
        max_attempts: int = 3,
        timeout: Optional[int] = None,
        validator: Optional[Validator] = None,
        backoff_seconds: float = 1.0,
    ) -> LLMResponse:
        """POST ``payload`` until a reply passes ``validator`` or attempts run out.

        Transport errors, non-200 statuses and malformed bodies never raise;
        the last problem seen is reported in ``LLMResponse.error``.
        """

        body = dict(payload)
        body.setdefault("model", self.model)
        body["stream"] = False
        last_error = "No attempts made"

        for attempt in range(1, max_attempts + 1):
            try:
                result = self._post(body, timeout or DEFAULT_REQUEST_TIMEOUT)
            except requests.exceptions.RequestException as exc:
                result = _failed(0, str(exc))

            if result.error is None:
                result.text = result.text.strip()
                rejection = self._rejection(result.text, validator)
                if rejection is None:
                    return result
                result.error = rejection

            last_error = result.error
            logger.warning(
                "LLM attempt %s/%s failed: %s",
                attempt,
                max_attempts,
                last_error,
                extra={"event": "llm.request.error", "status": result.status_code},
            )
            if attempt < max_attempts:
                time.sleep(backoff_seconds * attempt)

        return _failed(0, last_error)

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> "LLMClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def create_client(
    *,
    model: Optional[str] = None,
    api_url: Optional[str] = None,
    debug: Optional[bool] = None,
    api_key: Optional[str] = None,
    session: Optional[requests.Session] = None,
) -> LLMClient:
    """Return an :class:`LLMClient` configured from settings plus overrides."""

    settings = cfg.get_settings()
    client_settings = ClientSettings(
        model=model or settings.llm_model or cfg.DEFAULT_MODEL,
        api_url=api_url,
        api_key=api_key or cfg.get_llm_api_key(),
        debug=settings.debug if debug is None else debug,
    )
    return LLMClient(client_settings, session=session)


__all__ = [
    "ClientSettings",
    "LLMClient",
    "LLMResponse",
    "UNEXPECTED_SHAPE_ERROR",
    "create_client",
    "extract_message_text",
]
