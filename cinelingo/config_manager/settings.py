"""Pydantic models and helper utilities for configuration values."""
from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    SecretStr,
    ValidationError,
    field_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

from cinelingo import logging_manager

from .constants import (
    DEFAULT_ANNOTATION_CONTEXT,
    DEFAULT_LLM_MAX_ATTEMPTS,
    DEFAULT_LLM_TIMEOUT_SECONDS,
    DEFAULT_LLM_URL,
    DEFAULT_LOOP_MARGIN_SECONDS,
    DEFAULT_MODEL,
    DEFAULT_PLAYBACK_RATES,
)

logger = logging_manager.get_logger().getChild("config")


class CinelingoSettings(BaseModel):
    """Typed representation of the application configuration."""

    model_config = ConfigDict(extra="allow")

    llm_url: str = DEFAULT_LLM_URL
    llm_model: str = DEFAULT_MODEL
    llm_api_key: Optional[SecretStr] = None
    llm_timeout_seconds: int = DEFAULT_LLM_TIMEOUT_SECONDS
    llm_max_attempts: int = DEFAULT_LLM_MAX_ATTEMPTS
    annotation_context: str = DEFAULT_ANNOTATION_CONTEXT
    loop_margin_seconds: float = DEFAULT_LOOP_MARGIN_SECONDS
    playback_rates: list[float] = Field(default_factory=lambda: list(DEFAULT_PLAYBACK_RATES))
    debug: bool = False

    @field_validator("loop_margin_seconds")
    @classmethod
    def _non_negative_margin(cls, value: float) -> float:
        if value < 0:
            raise ValueError("loop_margin_seconds must be non-negative")
        return value

    @field_validator("playback_rates")
    @classmethod
    def _positive_rates(cls, value: list[float]) -> list[float]:
        if not value:
            raise ValueError("playback_rates must not be empty")
        if any(rate <= 0 for rate in value):
            raise ValueError("playback_rates must be positive")
        return value


class EnvironmentOverrides(BaseSettings):
    """Configuration overrides sourced from environment variables."""

    model_config = SettingsConfigDict(env_prefix="", extra="ignore")

    llm_url: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("CINELINGO_LLM_URL", "OLLAMA_URL")
    )
    llm_model: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("CINELINGO_LLM_MODEL")
    )
    llm_api_key: Optional[SecretStr] = Field(
        default=None,
        validation_alias=AliasChoices("CINELINGO_LLM_API_KEY", "OLLAMA_API_KEY"),
    )
    llm_timeout_seconds: Optional[int] = Field(
        default=None, validation_alias=AliasChoices("CINELINGO_LLM_TIMEOUT_SECONDS")
    )
    debug: Optional[bool] = Field(
        default=None, validation_alias=AliasChoices("CINELINGO_DEBUG")
    )


def load_environment_overrides() -> Dict[str, Any]:
    """Return configuration overrides sourced from environment variables."""

    try:
        overrides = EnvironmentOverrides()
    except ValidationError as exc:
        logger.warning(
            "Invalid environment configuration detected; using defaults.",
            extra={"event": "config.env.validation_error", "error": str(exc)},
        )
        return {}
    return overrides.model_dump(exclude_none=True)


def apply_settings_updates(
    settings: CinelingoSettings, updates: Dict[str, Any]
) -> CinelingoSettings:
    if not updates:
        return settings
    return settings.model_copy(update=updates)


__all__ = [
    "CinelingoSettings",
    "EnvironmentOverrides",
    "apply_settings_updates",
    "load_environment_overrides",
]
