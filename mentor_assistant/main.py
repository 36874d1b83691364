"""
Mentor Assistant – FastAPI server.

Routes:
  GET /                                   – liveness banner
  GET /health                             – liveness probe
  GET /summary/{mentorId}/{tutorId}        – scorecard summary (canonical)
  GET /summary/{mentorId}/{tutorId}/patterns – patterns/suggestions summary

Collaborators (token verifier, incident store, completion provider) are built
once in the lifespan handler from Settings, or injected by the caller of
create_app() (tests, MOCK_MODE tooling).
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import firebase_admin
import uvicorn
from fastapi import FastAPI, Header, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from mentor_assistant.config import Settings
from mentor_assistant.formats import PATTERNS, SCORECARD, SummaryFormat
from mentor_assistant.guard import (
    FirebaseTokenVerifier,
    MockTokenVerifier,
    TokenVerifier,
    init_firebase_app,
)
from mentor_assistant.providers import CompletionProvider, build_provider
from mentor_assistant.service import GENERIC_FAILURE_MESSAGE, SummaryService
from mentor_assistant.store import FirestoreIncidentStore, IncidentStore, InMemoryIncidentStore
from mentor_assistant.telemetry import configure_telemetry

logger = logging.getLogger("mentor-assistant")


def _build_collaborators(settings: Settings):
    """Create verifier, store and provider for the configured mode.

    Returns the three collaborators and the Firebase app to delete on
    shutdown (None in MOCK_MODE).
    """
    if settings.mock_mode:
        store = (
            InMemoryIncidentStore.from_file(settings.mock_data_file)
            if settings.mock_data_file
            else InMemoryIncidentStore()
        )
        logger.info('{"event":"startup","mode":"mock"}')
        return MockTokenVerifier(), store, build_provider(settings), None

    firebase_app = init_firebase_app(settings)
    provider = build_provider(settings)
    logger.info('{"event":"startup","mode":"live","provider":"%s","model":"%s"}', settings.ai_provider, provider.model)
    return FirebaseTokenVerifier(firebase_app), FirestoreIncidentStore(firebase_app), provider, firebase_app


def create_app(
    settings: Settings | None = None,
    verifier: TokenVerifier | None = None,
    store: IncidentStore | None = None,
    provider: CompletionProvider | None = None,
) -> FastAPI:
    """Create the FastAPI app.

    When all three collaborators are supplied they are used as-is and nothing
    is created or torn down by the lifespan handler.
    """
    settings = settings or Settings.from_env()
    configure_telemetry(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned_firebase_app = None
        if verifier is not None and store is not None and provider is not None:
            collaborators = (verifier, store, provider)
        else:
            built_verifier, built_store, built_provider, owned_firebase_app = _build_collaborators(settings)
            collaborators = (verifier or built_verifier, store or built_store, provider or built_provider)

        app.state.service = SummaryService(*collaborators, settings=settings)
        try:
            yield
        finally:
            active_provider = collaborators[2]
            if provider is None and hasattr(active_provider, "aclose"):
                await active_provider.aclose()
            if owned_firebase_app is not None:
                firebase_admin.delete_app(owned_firebase_app)
            logger.info('{"event":"shutdown"}')

    app = FastAPI(title="Mentor Assistant", version="0.1.0", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception('{"event":"unhandled_error","path":"%s"}', request.url.path)
        return JSONResponse(status_code=500, content={"message": GENERIC_FAILURE_MESSAGE})

    async def _summary(
        request: Request,
        mentor_id: str,
        tutor_id: str,
        authorization: str | None,
        summary_format: SummaryFormat,
    ) -> JSONResponse:
        service: SummaryService = request.app.state.service
        outcome = await service.summarize(authorization, mentor_id, tutor_id, summary_format)
        return JSONResponse(content=outcome.body, status_code=outcome.status_code, headers=outcome.headers)

    @app.get("/", response_class=PlainTextResponse)
    async def root() -> str:
        return "mentor assistant backend is running!"

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    @app.get("/summary/{mentor_id}/{tutor_id}")
    async def scorecard_summary(
        request: Request,
        mentor_id: str,
        tutor_id: str,
        authorization: str | None = Header(default=None),
    ) -> JSONResponse:
        return await _summary(request, mentor_id, tutor_id, authorization, SCORECARD)

    @app.get("/summary/{mentor_id}/{tutor_id}/patterns")
    async def patterns_summary(
        request: Request,
        mentor_id: str,
        tutor_id: str,
        authorization: str | None = Header(default=None),
    ) -> JSONResponse:
        return await _summary(request, mentor_id, tutor_id, authorization, PATTERNS)

    return app


# ---------------------------------------------------------------------------
# Local dev server
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    dev_settings = Settings.from_env()
    uvicorn.run(
        "mentor_assistant.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=dev_settings.port,
        reload=True,
    )
