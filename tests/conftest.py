"""Shared fixtures: in-memory collaborators and an app wired to them."""

import asyncio
import json

import pytest
from fastapi.testclient import TestClient

from mentor_assistant.config import Settings
from mentor_assistant.errors import CompletionResult, ProviderError
from mentor_assistant.guard import TokenRejected
from mentor_assistant.main import create_app
from mentor_assistant.schemas import CRITERIA
from mentor_assistant.service import SummaryService
from mentor_assistant.store import InMemoryIncidentStore
from mentor_assistant.telemetry import configure_telemetry

# First call wins; keeps span export off for every app the tests build.
configure_telemetry(Settings(otel_console_export=False))


def full_scorecard(summary="Solid tutor overall.", score=4):
    return {
        "summary": summary,
        "scores": {name: {"score": score, "justification": "Seen in several incidents."} for name in CRITERIA},
    }


class FakeVerifier:
    """Maps known tokens to uids; anything else is rejected."""

    def __init__(self, tokens=None):
        self.tokens = tokens or {"token-m1": "m1", "token-m2": "m2"}

    async def verify(self, token):
        try:
            return self.tokens[token]
        except KeyError:
            raise TokenRejected("unknown token")


class FakeProvider:
    """Returns a fixed text, records every call, optionally fails or stalls."""

    model = "fake-model"

    def __init__(self, text="", error=None, delay=0.0):
        self.text = text
        self.error = error
        self.delay = delay
        self.calls = []

    async def complete(self, prompt, response_schema=None):
        self.calls.append((prompt, response_schema))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return CompletionResult(text=self.text, model=self.model, prompt_tokens=10, completion_tokens=20)


class FailingStore:
    def __init__(self, error=None, delay=0.0):
        self.error = error or RuntimeError("firestore unavailable")
        self.delay = delay

    async def list_incidents(self, owner_id, subject_id):
        if self.delay:
            await asyncio.sleep(self.delay)
            return []
        raise self.error


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def verifier():
    return FakeVerifier()


@pytest.fixture
def store():
    return InMemoryIncidentStore({
        "m1": {
            "t1": [],
            "t2": [
                {"date": "2025-02-03T15:00:00Z", "description": "Arrived early and set up the room."},
                {"description": "Covered a colleague's session at short notice."},
            ],
        },
        "m2": {"t9": [{"description": "Replied to a parent the same day."}]},
    })


@pytest.fixture
def provider():
    return FakeProvider(text="Sure!\n```json\n" + json.dumps(full_scorecard()) + "\n```")


@pytest.fixture
def service(verifier, store, provider, settings):
    return SummaryService(verifier, store, provider, settings=settings)


@pytest.fixture
def make_client(verifier, store, settings):
    """Build a TestClient around the given provider (and optional overrides)."""
    clients = []

    def _make(provider, store_override=None, settings_override=None):
        app = create_app(
            settings=settings_override or settings,
            verifier=verifier,
            store=store_override or store,
            provider=provider,
        )
        client = TestClient(app)
        client.__enter__()
        clients.append(client)
        return client

    yield _make
    for client in clients:
        client.__exit__(None, None, None)


@pytest.fixture
def provider_error():
    return ProviderError("quota exceeded")
