"""
Structured output schemas for Mentor Assistant.

Used for jsonschema validation of extracted model output and, via
to_provider_schema(), as the response-schema hint sent to the AI provider.
"""

from __future__ import annotations

import copy

CRITERIA: tuple[str, ...] = (
    "Suggests New Ideas",
    "Collaboration",
    "Responsiveness",
    "Adaptability",
    "Feedback",
    "Attendance",
    "Professionalism",
)

NEUTRAL_SCORE = 3
INSUFFICIENT_INFORMATION = "Insufficient information."

SCORE_CRITERION_SCHEMA: dict = {
    "type": "object",
    "required": ["score", "justification"],
    "properties": {
        "score": {"type": "integer", "minimum": 1, "maximum": 5},
        "justification": {"type": "string"},
    },
}

SCORECARD_OUTPUT_SCHEMA: dict = {
    "type": "object",
    "required": ["summary", "scores"],
    "properties": {
        "summary": {"type": "string"},
        "scores": {
            "type": "object",
            "required": list(CRITERIA),
            "properties": {name: SCORE_CRITERION_SCHEMA for name in CRITERIA},
        },
    },
}

PATTERNS_OUTPUT_SCHEMA: dict = {
    "type": "object",
    "required": ["summary", "patterns", "suggestions"],
    "properties": {
        "summary": {"type": "string"},
        "patterns": {"type": "array", "items": {"type": "string"}},
        "suggestions": {"type": "array", "items": {"type": "string"}},
    },
}

# Keys the Gemini Schema type understands; everything else is dropped.
_PROVIDER_KEYS = ("type", "properties", "items", "required", "enum", "minimum", "maximum", "description")


def to_provider_schema(schema: dict) -> dict:
    """Convert a JSON Schema document into the provider's OpenAPI-style subset.

    Type names are upper-cased (``object`` -> ``OBJECT``) and keywords the
    provider does not accept are removed.
    """
    converted: dict = {}
    for key in _PROVIDER_KEYS:
        if key not in schema:
            continue
        value = schema[key]
        if key == "type":
            converted[key] = value.upper()
        elif key == "properties":
            converted[key] = {name: to_provider_schema(sub) for name, sub in value.items()}
        elif key == "items":
            converted[key] = to_provider_schema(value)
        else:
            converted[key] = copy.deepcopy(value)
    return converted
