"""Subtitle ingestion and playback synchronization for cinelingo."""

from .environment import load_environment

# Load environment variables from .env-style files as soon as the package is
# imported so configuration overrides apply before the first settings lookup.
load_environment()

__all__ = ["load_environment"]
