"""Service-layer exceptions."""

from __future__ import annotations


class AnnotationGenerationError(RuntimeError):
    """Raised when the annotation generator cannot produce usable output."""


__all__ = ["AnnotationGenerationError"]
