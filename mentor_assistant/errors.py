"""
Failure taxonomy and per-stage result values for the summary pipeline.

Every stage of the Summary Service returns one of the result types below
instead of raising, so the orchestrator can branch on ``failure`` explicitly.
Collaborator exceptions are converted at the stage boundary.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class FailureKind(str, Enum):
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NO_JSON_FOUND = "no_json_found"
    MALFORMED_JSON = "malformed_json"
    PROVIDER_FAILURE = "provider_failure"
    STORE_FAILURE = "store_failure"
    TIMEOUT = "timeout"
    SCHEMA_VIOLATION = "schema_violation"

    @property
    def status_code(self) -> int:
        if self is FailureKind.UNAUTHORIZED:
            return 401
        if self is FailureKind.FORBIDDEN:
            return 403
        return 500


class ExtractionError(ValueError):
    """Raised when no usable JSON object can be pulled out of model text."""

    def __init__(self, reason: FailureKind, message: str, cause: Exception | None = None):
        super().__init__(message)
        self.reason = reason
        self.cause = cause


class ProviderError(RuntimeError):
    """Raised by completion providers when the model call fails or returns nothing."""


@dataclass(frozen=True)
class AuthResult:
    uid: str | None = None
    failure: FailureKind | None = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.failure is None


@dataclass(frozen=True)
class FetchResult:
    incidents: list = field(default_factory=list)
    failure: FailureKind | None = None
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.failure is None


@dataclass(frozen=True)
class CompletionResult:
    text: str = ""
    model: str | None = None
    prompt_tokens: int | None = None
    completion_tokens: int | None = None
    failure: FailureKind | None = None
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.failure is None


@dataclass(frozen=True)
class ExtractResult:
    payload: dict[str, Any] | None = None
    failure: FailureKind | None = None
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.failure is None
