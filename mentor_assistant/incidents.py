"""Incident records as read from the incident store."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

UNKNOWN_DATE = "unknown date"


@dataclass(frozen=True)
class Incident:
    timestamp: datetime | None
    description: str

    @classmethod
    def from_document(cls, data: dict[str, Any]) -> "Incident":
        """Build an Incident from a stored document (``date`` + ``description``)."""
        timestamp = data.get("date")
        if isinstance(timestamp, str):
            try:
                timestamp = datetime.fromisoformat(timestamp.replace("Z", "+00:00"))
            except ValueError:
                timestamp = None
        elif not isinstance(timestamp, datetime):
            timestamp = None
        return cls(timestamp=timestamp, description=str(data.get("description", "")))

    def render(self) -> str:
        return f"{format_timestamp(self.timestamp)}: {self.description}"


def format_timestamp(value: datetime | None) -> str:
    """ISO-8601 in UTC with millisecond precision, e.g. 2024-03-01T09:30:00.000Z."""
    if value is None:
        return UNKNOWN_DATE
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")
