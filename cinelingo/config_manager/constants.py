"""Constants shared by the configuration helpers."""
from __future__ import annotations

import os
from pathlib import Path

MODULE_DIR = Path(__file__).resolve().parent
PACKAGE_DIR = MODULE_DIR.parent
# Defaults ship inside the package as package data.
PACKAGE_CONF_DIR = PACKAGE_DIR / "conf"
# Local overrides are read from the deployment directory.
CONF_DIR = Path(os.environ.get("CINELINGO_CONF_DIR") or Path.cwd() / "conf")
DEFAULT_CONFIG_PATH = PACKAGE_CONF_DIR / "config.json"
DEFAULT_LOCAL_CONFIG_PATH = CONF_DIR / "config.local.json"

DEFAULT_LLM_URL = os.environ.get("OLLAMA_URL", "http://localhost:11434/api/chat")
DEFAULT_MODEL = "gemma2:27b"
DEFAULT_LLM_TIMEOUT_SECONDS = 45
DEFAULT_LLM_MAX_ATTEMPTS = 2
DEFAULT_ANNOTATION_CONTEXT = "General conversation"

# Seconds before a cue's end at which sentence looping seeks back.
DEFAULT_LOOP_MARGIN_SECONDS = 0.1
DEFAULT_PLAYBACK_RATES = (0.75, 1.0, 1.25, 1.5)

SENSITIVE_CONFIG_KEYS = {"llm_api_key"}

__all__ = [
    "CONF_DIR",
    "DEFAULT_ANNOTATION_CONTEXT",
    "DEFAULT_CONFIG_PATH",
    "DEFAULT_LLM_MAX_ATTEMPTS",
    "DEFAULT_LLM_TIMEOUT_SECONDS",
    "DEFAULT_LLM_URL",
    "DEFAULT_LOCAL_CONFIG_PATH",
    "DEFAULT_LOOP_MARGIN_SECONDS",
    "DEFAULT_MODEL",
    "DEFAULT_PLAYBACK_RATES",
    "MODULE_DIR",
    "PACKAGE_CONF_DIR",
    "PACKAGE_DIR",
    "SENSITIVE_CONFIG_KEYS",
]
