"""
Incident stores.

Incidents live in Firestore under
``mentors/{mentorId}/tutors/{tutorId}/incidents``. The in-memory store keeps
the same (owner, subject) addressing and backs MOCK_MODE and the tests.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Protocol

import firebase_admin
from firebase_admin import firestore_async

from mentor_assistant.incidents import Incident

logger = logging.getLogger("mentor-assistant.store")


class IncidentStore(Protocol):
    async def list_incidents(self, owner_id: str, subject_id: str) -> list[Incident]:
        ...


class FirestoreIncidentStore:
    """Reads incident documents with the Firestore async client."""

    def __init__(self, app: firebase_admin.App):
        self._db = firestore_async.client(app)

    def _incidents_ref(self, owner_id: str, subject_id: str):
        return (
            self._db.collection("mentors")
            .document(owner_id)
            .collection("tutors")
            .document(subject_id)
            .collection("incidents")
        )

    async def list_incidents(self, owner_id: str, subject_id: str) -> list[Incident]:
        snapshots = await self._incidents_ref(owner_id, subject_id).get()
        return [Incident.from_document(snapshot.to_dict() or {}) for snapshot in snapshots]


class InMemoryIncidentStore:
    """Dict-backed store: ``{owner_id: {subject_id: [document, ...]}}``."""

    def __init__(self, documents: dict[str, dict[str, list[dict[str, Any]]]] | None = None):
        self._documents = documents if documents is not None else {}

    @classmethod
    def from_file(cls, path: Path) -> "InMemoryIncidentStore":
        data = json.loads(path.read_text(encoding="utf-8"))
        logger.info("Loaded mock incidents for %d owner(s) from %s", len(data), path.name)
        return cls(data)

    def add(self, owner_id: str, subject_id: str, document: dict[str, Any]) -> None:
        self._documents.setdefault(owner_id, {}).setdefault(subject_id, []).append(document)

    async def list_incidents(self, owner_id: str, subject_id: str) -> list[Incident]:
        documents = self._documents.get(owner_id, {}).get(subject_id, [])
        return [Incident.from_document(doc) for doc in documents]
