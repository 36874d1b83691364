"""
Tests for the Firebase-backed collaborators with the SDK entry points patched.
"""

import asyncio
from datetime import datetime, timezone
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from firebase_admin import auth

from mentor_assistant import store as store_module
from mentor_assistant.config import Settings
from mentor_assistant.guard import INVALID_TOKEN_MESSAGE, FirebaseTokenVerifier, TokenRejected
from mentor_assistant.incidents import Incident
from mentor_assistant.main import create_app
from mentor_assistant.store import FirestoreIncidentStore, InMemoryIncidentStore

from conftest import FakeProvider

FIREBASE_APP = object()


class TestFirebaseTokenVerifier:
    def test_returns_uid_of_decoded_token(self, monkeypatch):
        calls = []

        def verify_id_token(token, app=None):
            calls.append((token, app))
            return {"uid": "m1", "email": "m1@example.com"}

        monkeypatch.setattr(auth, "verify_id_token", verify_id_token)
        uid = asyncio.run(FirebaseTokenVerifier(FIREBASE_APP).verify("id-token"))
        assert uid == "m1"
        assert calls == [("id-token", FIREBASE_APP)]

    @pytest.mark.parametrize(
        "error",
        [ValueError("Illegal ID token provided."), auth.InvalidIdTokenError("Token signature invalid.")],
    )
    def test_sdk_rejection_becomes_token_rejected(self, monkeypatch, error):
        def verify_id_token(token, app=None):
            raise error

        monkeypatch.setattr(auth, "verify_id_token", verify_id_token)
        with pytest.raises(TokenRejected) as excinfo:
            asyncio.run(FirebaseTokenVerifier(FIREBASE_APP).verify("id-token"))
        assert excinfo.value.__cause__ is error

    def test_rejected_token_is_403_over_http(self, monkeypatch):
        def verify_id_token(token, app=None):
            raise auth.InvalidIdTokenError("Token expired.")

        monkeypatch.setattr(auth, "verify_id_token", verify_id_token)
        provider = FakeProvider(text='{"summary": "unused"}')
        app = create_app(
            settings=Settings(),
            verifier=FirebaseTokenVerifier(FIREBASE_APP),
            store=InMemoryIncidentStore({"m1": {"t2": [{"description": "x"}]}}),
            provider=provider,
        )
        with TestClient(app) as client:
            r = client.get("/summary/m1/t2", headers={"Authorization": "Bearer expired"})
        assert r.status_code == 403
        assert r.json() == {"error": INVALID_TOKEN_MESSAGE}
        assert provider.calls == []


class _Reference:
    """Stands in for Firestore collection and document references."""

    def __init__(self, db, path):
        self._db = db
        self.path = path

    def collection(self, name):
        return _Reference(self._db, self.path + [("collection", name)])

    def document(self, name):
        return _Reference(self._db, self.path + [("document", name)])

    async def get(self):
        self._db.queried.append(self.path)
        return self._db.snapshots


class _Database(_Reference):
    def __init__(self, snapshots):
        super().__init__(self, [])
        self.snapshots = snapshots
        self.queried = []


def _snapshot(data):
    return SimpleNamespace(to_dict=lambda: data)


class TestFirestoreIncidentStore:
    @pytest.fixture
    def database(self, monkeypatch):
        db = _Database([
            _snapshot({"date": datetime(2025, 2, 3, 15, 0, tzinfo=timezone.utc), "description": "Arrived early"}),
            _snapshot({"description": "Covered a session"}),
            _snapshot(None),
        ])
        clients = []

        def client(app=None):
            clients.append(app)
            return db

        monkeypatch.setattr(store_module.firestore_async, "client", client)
        db.clients = clients
        return db

    def test_reads_nested_incidents_collection(self, database):
        incidents = asyncio.run(FirestoreIncidentStore(FIREBASE_APP).list_incidents("m1", "t2"))
        assert database.clients == [FIREBASE_APP]
        assert database.queried == [[
            ("collection", "mentors"),
            ("document", "m1"),
            ("collection", "tutors"),
            ("document", "t2"),
            ("collection", "incidents"),
        ]]
        assert incidents == [
            Incident(datetime(2025, 2, 3, 15, 0, tzinfo=timezone.utc), "Arrived early"),
            Incident(None, "Covered a session"),
            Incident(None, ""),
        ]

    def test_empty_collection(self, database):
        database.snapshots = []
        assert asyncio.run(FirestoreIncidentStore(FIREBASE_APP).list_incidents("m1", "t1")) == []
