"""
Mock model responses – deterministic golden outputs for local validation.

When MOCK_MODE=true, the app uses MockProvider instead of calling a real
model. Each golden file in ``golden/`` holds one summary object; the file is
picked by matching its top-level keys against the required keys of the
response schema the service asks for.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from mentor_assistant.errors import CompletionResult, ProviderError

logger = logging.getLogger("mentor-assistant.mock")

_GOLDEN_DIR = Path(__file__).resolve().parent / "golden"
_GOLDEN_RESPONSES: dict[str, dict] = {}


def _load_golden_responses() -> None:
    if _GOLDEN_RESPONSES:
        return
    if not _GOLDEN_DIR.exists():
        logger.warning("Golden output directory not found: %s", _GOLDEN_DIR)
        return
    for f in sorted(_GOLDEN_DIR.glob("*.json")):
        try:
            data = json.loads(f.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Failed to load %s: %s", f.name, exc)
            continue
        _GOLDEN_RESPONSES[f.stem] = data
        logger.info("Loaded golden response %s", f.name)


def get_mock_response(response_schema: dict | None) -> dict | None:
    """Return the golden summary whose keys match the schema's required keys."""
    _load_golden_responses()
    required = set((response_schema or {}).get("required", []))
    for data in _GOLDEN_RESPONSES.values():
        if set(data) == required:
            return json.loads(json.dumps(data))
    return None


class MockProvider:
    """Completion provider that answers from golden outputs, no credentials needed."""

    model = "mock-model"

    async def complete(self, prompt: str, response_schema: dict | None = None) -> CompletionResult:
        data = get_mock_response(response_schema)
        if data is None:
            raise ProviderError("No mock golden output for the requested response schema")
        # Real models tend to wrap JSON in prose and fences; mirror that.
        raw_text = "Here is the summary:\n```json\n" + json.dumps(data, indent=2) + "\n```"
        return CompletionResult(
            text=raw_text,
            model=self.model,
            prompt_tokens=len(prompt) // 4,
            completion_tokens=len(raw_text) // 4,
        )
