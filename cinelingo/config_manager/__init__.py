"""High-level configuration management for cinelingo."""
from __future__ import annotations

from typing import Optional

from .constants import (
    CONF_DIR,
    DEFAULT_ANNOTATION_CONTEXT,
    DEFAULT_CONFIG_PATH,
    DEFAULT_LLM_URL,
    DEFAULT_LOCAL_CONFIG_PATH,
    DEFAULT_LOOP_MARGIN_SECONDS,
    DEFAULT_MODEL,
    DEFAULT_PLAYBACK_RATES,
)
from .loader import export_settings, get_settings, load_configuration, reset_settings
from .settings import CinelingoSettings, EnvironmentOverrides


def get_llm_url() -> str:
    """Return the chat endpoint configured for annotation generation."""

    return get_settings().llm_url or DEFAULT_LLM_URL


def get_llm_api_key() -> Optional[str]:
    """Return the plain-text LLM API key when one is configured."""

    secret = get_settings().llm_api_key
    return secret.get_secret_value() if secret is not None else None


__all__ = [
    "CONF_DIR",
    "CinelingoSettings",
    "DEFAULT_ANNOTATION_CONTEXT",
    "DEFAULT_CONFIG_PATH",
    "DEFAULT_LLM_URL",
    "DEFAULT_LOCAL_CONFIG_PATH",
    "DEFAULT_LOOP_MARGIN_SECONDS",
    "DEFAULT_MODEL",
    "DEFAULT_PLAYBACK_RATES",
    "EnvironmentOverrides",
    "export_settings",
    "get_llm_api_key",
    "get_llm_url",
    "get_settings",
    "load_configuration",
    "reset_settings",
]
