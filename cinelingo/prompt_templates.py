"""Prompt builders for annotation generation requests."""

from __future__ import annotations

from typing import Dict, List, Optional

from cinelingo import config_manager as cfg

SOURCE_START = "<<<BEGIN_SUBTITLE_LINE>>>"
SOURCE_END = "<<<END_SUBTITLE_LINE>>>"

ANNOTATION_CATEGORIES = ("vocabulary", "grammar", "culture")


def make_annotation_system_prompt(*, context: str, max_points: int = 3) -> str:
    """Return the system prompt asking for structured learning points."""

    resolved_context = (context or "").strip() or cfg.DEFAULT_ANNOTATION_CONTEXT
    categories = ", ".join(f"'{name}'" for name in ANNOTATION_CATEGORIES)
    return "\n".join(
        [
            "You are a language tutor explaining a subtitle line from a TV show.",
            f"Context: {resolved_context}.",
            f"The subtitle line is between {SOURCE_START} and {SOURCE_END}.",
            "Never include those markers in your response.",
            f"Provide 2-{max_points} short, distinct learning points.",
            'Respond with ONLY a JSON object of the form {"points": [...]}',
            "where each point is an object with the keys:",
            f'- "type": one of {categories};',
            '- "anchor": the exact words from the line that the point explains;',
            '- "content": the explanation, under 50 words.',
        ]
    )


def make_annotation_payload(
    line_text: str,
    *,
    context: str,
    model: Optional[str] = None,
) -> Dict[str, object]:
    """Build a chat payload requesting annotations for ``line_text``."""

    if model is None:
        model = cfg.DEFAULT_MODEL

    messages: List[Dict[str, str]] = [
        {"role": "system", "content": make_annotation_system_prompt(context=context)},
        {"role": "user", "content": f"{SOURCE_START}\n{line_text}\n{SOURCE_END}"},
    ]
    return {"model": model, "messages": messages, "stream": False, "format": "json"}


__all__ = [
    "ANNOTATION_CATEGORIES",
    "SOURCE_END",
    "SOURCE_START",
    "make_annotation_payload",
    "make_annotation_system_prompt",
]
