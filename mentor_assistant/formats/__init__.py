"""
Summary formats served by Mentor Assistant.

Each format bundles the instruction template sent to the model, the JSON
Schema the answer is validated against, and the canned result returned when
a tutor has no incidents yet:

  - scorecard → summary + 1-5 scores for the seven fixed criteria (canonical)
  - patterns  → summary + behavioural patterns + suggestions
"""

from __future__ import annotations

from dataclasses import dataclass
from string import Template

from mentor_assistant.formats.patterns import PATTERNS_INSTRUCTIONS
from mentor_assistant.formats.scorecard import SCORECARD_INSTRUCTIONS
from mentor_assistant.schemas import (
    PATTERNS_OUTPUT_SCHEMA,
    SCORECARD_OUTPUT_SCHEMA,
    to_provider_schema,
)

EMPTY_SUMMARY = "No incidents to summarize yet."


@dataclass(frozen=True)
class SummaryFormat:
    name: str
    instructions: Template
    output_schema: dict
    empty_fields: tuple[tuple[str, type], ...]

    @property
    def provider_schema(self) -> dict:
        return to_provider_schema(self.output_schema)

    def empty_result(self) -> dict:
        """Fresh copy of the result returned when there is nothing to summarise."""
        result: dict = {"summary": EMPTY_SUMMARY}
        for key, factory in self.empty_fields:
            result[key] = factory()
        return result


SCORECARD = SummaryFormat(
    name="scorecard",
    instructions=Template(SCORECARD_INSTRUCTIONS),
    output_schema=SCORECARD_OUTPUT_SCHEMA,
    empty_fields=(("scores", dict),),
)

PATTERNS = SummaryFormat(
    name="patterns",
    instructions=Template(PATTERNS_INSTRUCTIONS),
    output_schema=PATTERNS_OUTPUT_SCHEMA,
    empty_fields=(("patterns", list), ("suggestions", list)),
)

FORMATS: dict[str, SummaryFormat] = {f.name: f for f in (SCORECARD, PATTERNS)}

__all__ = ["EMPTY_SUMMARY", "FORMATS", "PATTERNS", "SCORECARD", "SummaryFormat"]
