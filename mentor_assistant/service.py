"""
Summary Service – orchestrates one summary request end to end.

  Authorizing → Fetching → (EmptyShortCircuit | Prompting) → Extracting
  → Validating → Responding

Each stage returns an explicit result value; any failure moves the request to
the Failed state. Auth failures keep their own status and message, every
other failure is collapsed into a generic 500 body and only logged in detail.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any

import jsonschema

from mentor_assistant.config import Settings
from mentor_assistant.errors import (
    AuthResult,
    CompletionResult,
    ExtractResult,
    FailureKind,
    FetchResult,
    ProviderError,
)
from mentor_assistant.extraction import extract_result
from mentor_assistant.formats import SCORECARD, SummaryFormat
from mentor_assistant.guard import TokenVerifier, authorize
from mentor_assistant.prompting import build_prompt
from mentor_assistant.providers import CompletionProvider
from mentor_assistant.store import IncidentStore
from mentor_assistant.telemetry import get_tracer, new_correlation_id

logger = logging.getLogger("mentor-assistant")

GENERIC_FAILURE_MESSAGE = "Something wrong happened"


@dataclass
class SummaryOutcome:
    status_code: int
    body: dict[str, Any]
    headers: dict[str, str] = field(default_factory=dict)
    failure: FailureKind | None = None


class SummaryService:
    def __init__(
        self,
        verifier: TokenVerifier,
        store: IncidentStore,
        provider: CompletionProvider,
        settings: Settings | None = None,
    ):
        self.verifier = verifier
        self.store = store
        self.provider = provider
        self.settings = settings or Settings()
        self._tracer = get_tracer()

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------
    async def fetch(self, owner_id: str, subject_id: str) -> FetchResult:
        try:
            incidents = await asyncio.wait_for(
                self.store.list_incidents(owner_id, subject_id),
                timeout=self.settings.store_timeout_seconds,
            )
        except asyncio.TimeoutError:
            return FetchResult(
                failure=FailureKind.TIMEOUT,
                detail=f"store read exceeded {self.settings.store_timeout_seconds}s",
            )
        except Exception as exc:
            return FetchResult(failure=FailureKind.STORE_FAILURE, detail=str(exc))
        return FetchResult(incidents=list(incidents))

    async def complete(self, prompt: str, summary_format: SummaryFormat) -> CompletionResult:
        try:
            result = await asyncio.wait_for(
                self.provider.complete(prompt, summary_format.provider_schema),
                timeout=self.settings.provider_timeout_seconds,
            )
        except asyncio.TimeoutError:
            return CompletionResult(
                failure=FailureKind.TIMEOUT,
                detail=f"model call exceeded {self.settings.provider_timeout_seconds}s",
            )
        except ProviderError as exc:
            return CompletionResult(failure=FailureKind.PROVIDER_FAILURE, detail=str(exc))
        except Exception as exc:
            return CompletionResult(failure=FailureKind.PROVIDER_FAILURE, detail=f"{type(exc).__name__}: {exc}")
        if not result.text:
            return CompletionResult(failure=FailureKind.PROVIDER_FAILURE, detail="No text response from AI.")
        return result

    def extract(self, raw_text: str) -> ExtractResult:
        return extract_result(raw_text, self.settings.extraction_strategy)

    @staticmethod
    def validate(payload: Any, summary_format: SummaryFormat) -> str | None:
        """Return the first schema violation message, or None when valid."""
        try:
            jsonschema.validate(instance=payload, schema=summary_format.output_schema)
        except jsonschema.ValidationError as exc:
            return exc.message
        return None

    # ------------------------------------------------------------------
    # Orchestration
    # ------------------------------------------------------------------
    def _failed(self, correlation_id: str, kind: FailureKind, stage: str, detail: str) -> SummaryOutcome:
        logger.error(
            '{"event":"%s_failed","correlation_id":"%s","failure":"%s","error":"%s"}',
            stage,
            correlation_id,
            kind.value,
            detail,
        )
        return SummaryOutcome(
            status_code=500,
            body={"message": GENERIC_FAILURE_MESSAGE},
            headers={"X-Correlation-ID": correlation_id},
            failure=kind,
        )

    async def summarize(
        self,
        authorization: str | None,
        owner_id: str,
        subject_id: str,
        summary_format: SummaryFormat = SCORECARD,
    ) -> SummaryOutcome:
        correlation_id = new_correlation_id()

        with self._tracer.start_as_current_span(
            "summarize",
            attributes={"correlation_id": correlation_id, "summary_format": summary_format.name},
        ) as span:
            # --- Authorizing ---
            with self._tracer.start_as_current_span("authorize"):
                auth: AuthResult = await authorize(authorization, owner_id, self.verifier)
            if not auth.ok:
                logger.warning(
                    '{"event":"auth_failed","correlation_id":"%s","failure":"%s"}',
                    correlation_id,
                    auth.failure.value,
                )
                return SummaryOutcome(
                    status_code=auth.failure.status_code,
                    body={"error": auth.message},
                    failure=auth.failure,
                )

            logger.info(
                '{"event":"request_received","correlation_id":"%s","owner_id":"%s","subject_id":"%s","format":"%s"}',
                correlation_id,
                owner_id,
                subject_id,
                summary_format.name,
            )

            # --- Fetching ---
            with self._tracer.start_as_current_span("fetch_incidents"):
                fetched = await self.fetch(owner_id, subject_id)
            if not fetched.ok:
                return self._failed(correlation_id, fetched.failure, "fetch", fetched.detail)

            logger.info(
                '{"event":"incidents_fetched","correlation_id":"%s","count":%d}',
                correlation_id,
                len(fetched.incidents),
            )

            # --- EmptyShortCircuit ---
            if not fetched.incidents:
                span.set_attribute("short_circuit", True)
                logger.info('{"event":"empty_short_circuit","correlation_id":"%s"}', correlation_id)
                return SummaryOutcome(
                    status_code=200,
                    body=summary_format.empty_result(),
                    headers={"X-Correlation-ID": correlation_id},
                )

            # --- Prompting ---
            prompt = build_prompt(fetched.incidents, summary_format)
            with self._tracer.start_as_current_span(
                "call_model",
                attributes={"model": self.provider.model, "correlation_id": correlation_id},
            ):
                completion = await self.complete(prompt, summary_format)
            if not completion.ok:
                return self._failed(correlation_id, completion.failure, "model_call", completion.detail)

            logger.info(
                '{"event":"model_response_received","correlation_id":"%s","selected_model":"%s","prompt_tokens":%s,"completion_tokens":%s}',
                correlation_id,
                completion.model,
                completion.prompt_tokens,
                completion.completion_tokens,
            )

            # --- Extracting ---
            with self._tracer.start_as_current_span("extract_json"):
                extracted = self.extract(completion.text)
            if not extracted.ok:
                logger.error(
                    '{"event":"json_extract_failed","correlation_id":"%s","raw_head":"%s"}',
                    correlation_id,
                    completion.text[:200],
                )
                return self._failed(correlation_id, extracted.failure, "extract", extracted.detail)

            # --- Validating ---
            headers = {"X-Correlation-ID": correlation_id}
            with self._tracer.start_as_current_span("validate_output"):
                violation = self.validate(extracted.payload, summary_format)
            if violation is not None:
                if self.settings.strict_output_validation:
                    return self._failed(correlation_id, FailureKind.SCHEMA_VIOLATION, "validate", violation)
                logger.warning(
                    '{"event":"output_validation_failed","correlation_id":"%s","error":"%s"}',
                    correlation_id,
                    violation,
                )
                headers["X-Schema-Valid"] = "false"
            span.set_attribute("output.schema_valid", violation is None)

            # --- Responding ---
            logger.info('{"event":"request_complete","correlation_id":"%s"}', correlation_id)
            return SummaryOutcome(status_code=200, body=extracted.payload, headers=headers)
