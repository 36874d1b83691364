"""
Structured response extraction.

Generative models routinely wrap the JSON they were asked for in prose or
markdown fences. The extractor pulls the embedded object out of the raw text
and parses it. Two strategies are available:

  span      – first ``{`` to last ``}`` inclusive (the long-standing behaviour)
  balanced  – first balanced top-level object, aware of strings and escapes

Neither strategy validates the parsed object against an output schema; that
happens in the Summary Service.
"""

from __future__ import annotations

import json
from typing import Any

from mentor_assistant.errors import ExtractionError, ExtractResult, FailureKind


def _span_candidate(text: str) -> str:
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end == -1 or end < start:
        raise ExtractionError(FailureKind.NO_JSON_FOUND, "AI response did not contain valid JSON.")
    return text[start:end + 1]


def _balanced_candidate(text: str) -> str:
    start = text.find("{")
    if start == -1 or text.rfind("}") == -1:
        raise ExtractionError(FailureKind.NO_JSON_FOUND, "AI response did not contain valid JSON.")

    depth = 0
    in_string = False
    escaped = False
    for index in range(start, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return text[start:index + 1]

    raise ExtractionError(
        FailureKind.MALFORMED_JSON,
        f"Unbalanced JSON object starting at offset {start}.",
    )


def _reject_constant(name: str):
    # NaN, Infinity and -Infinity are Python extensions, not JSON.
    raise ValueError(f"{name} is not a valid JSON value")


_STRATEGIES = {
    "span": _span_candidate,
    "balanced": _balanced_candidate,
}


def extract(raw_text: str, strategy: str = "span") -> Any:
    """Locate the JSON object embedded in ``raw_text`` and parse it.

    Raises ExtractionError with reason NO_JSON_FOUND when the text holds no
    braces, or MALFORMED_JSON when the candidate substring does not parse.
    """
    try:
        find_candidate = _STRATEGIES[strategy]
    except KeyError:
        raise ValueError(f"Unknown extraction strategy: {strategy!r}")

    candidate = find_candidate(raw_text or "")
    try:
        return json.loads(candidate, parse_constant=_reject_constant)
    except json.JSONDecodeError as exc:
        raise ExtractionError(
            FailureKind.MALFORMED_JSON,
            f"AI response JSON could not be parsed: {exc.msg} (line {exc.lineno}, column {exc.colno})",
            cause=exc,
        ) from exc
    except ValueError as exc:
        raise ExtractionError(
            FailureKind.MALFORMED_JSON,
            f"AI response JSON could not be parsed: {exc}",
            cause=exc,
        ) from exc


def extract_result(raw_text: str, strategy: str = "span") -> ExtractResult:
    """Same as extract(), reported as an ExtractResult instead of raising."""
    try:
        payload = extract(raw_text, strategy)
    except ExtractionError as exc:
        return ExtractResult(failure=exc.reason, detail=str(exc))
    return ExtractResult(payload=payload)
