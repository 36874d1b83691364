"""
Prompt construction for Mentor Assistant.

Builds the single user-turn prompt from a tutor's incidents and the
instruction template of the requested summary format. Descriptions are
passed through exactly as the mentor wrote them.
"""

from __future__ import annotations

from typing import Iterable

from mentor_assistant.formats import SCORECARD, SummaryFormat
from mentor_assistant.incidents import Incident


def render_incidents(incidents: Iterable[Incident]) -> str:
    """One ``<timestamp>: <description>`` line per incident."""
    return "\n".join(incident.render() for incident in incidents)


def build_prompt(incidents: Iterable[Incident], summary_format: SummaryFormat = SCORECARD) -> str:
    return summary_format.instructions.substitute(incidents=render_incidents(incidents))
