"""
Access guard – bearer-token verification and the ownership check.

A caller may only request summaries for data they own: the uid carried by the
verified ID token must equal the ``ownerId`` path parameter.
"""

from __future__ import annotations

import logging
from typing import Protocol

import firebase_admin
from firebase_admin import auth, credentials, exceptions
from starlette.concurrency import run_in_threadpool

from mentor_assistant.config import Settings
from mentor_assistant.errors import AuthResult, FailureKind

logger = logging.getLogger("mentor-assistant.guard")

BEARER_PREFIX = "Bearer "

NO_TOKEN_MESSAGE = "Unauthorized: No token provided."
INVALID_TOKEN_MESSAGE = "Forbidden: Invalid token."
NOT_OWNER_MESSAGE = "Forbidden: You can only access your own data."


class TokenRejected(Exception):
    """Raised by a TokenVerifier when the token cannot be verified."""


class TokenVerifier(Protocol):
    async def verify(self, token: str) -> str:
        """Return the verified uid for ``token`` or raise TokenRejected."""
        ...


def init_firebase_app(settings: Settings, name: str = "[DEFAULT]") -> firebase_admin.App:
    """Initialise (or reuse) the Firebase Admin app from service-account settings."""
    try:
        return firebase_admin.get_app(name)
    except ValueError:
        pass

    if settings.firebase_credentials_path:
        cred = credentials.Certificate(settings.firebase_credentials_path)
    else:
        cred = credentials.Certificate({
            "type": "service_account",
            "project_id": settings.firebase_project_id,
            "client_email": settings.firebase_client_email,
            "private_key": settings.firebase_private_key,
            "token_uri": "https://oauth2.googleapis.com/token",
        })
    return firebase_admin.initialize_app(cred, name=name)


class FirebaseTokenVerifier:
    """Verifies Firebase Authentication ID tokens with the Admin SDK."""

    def __init__(self, app: firebase_admin.App):
        self._app = app

    async def verify(self, token: str) -> str:
        try:
            decoded = await run_in_threadpool(auth.verify_id_token, token, app=self._app)
        except (ValueError, exceptions.FirebaseError) as exc:
            raise TokenRejected(str(exc)) from exc
        return decoded["uid"]


class MockTokenVerifier:
    """Accepts tokens of the form ``mock-<uid>``; used in MOCK_MODE only."""

    prefix = "mock-"

    async def verify(self, token: str) -> str:
        if not token.startswith(self.prefix) or len(token) == len(self.prefix):
            raise TokenRejected("not a mock token")
        return token[len(self.prefix):]


def bearer_token(authorization: str | None) -> str | None:
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        return None
    token = authorization[len(BEARER_PREFIX):].strip()
    return token or None


async def authorize(authorization: str | None, owner_id: str, verifier: TokenVerifier) -> AuthResult:
    """Check the Authorization header and that the caller owns ``owner_id``."""
    token = bearer_token(authorization)
    if token is None:
        return AuthResult(failure=FailureKind.UNAUTHORIZED, message=NO_TOKEN_MESSAGE)

    try:
        uid = await verifier.verify(token)
    except TokenRejected as exc:
        logger.warning('{"event":"token_rejected","error":"%s"}', exc)
        return AuthResult(failure=FailureKind.FORBIDDEN, message=INVALID_TOKEN_MESSAGE)

    if uid != owner_id:
        return AuthResult(uid=uid, failure=FailureKind.FORBIDDEN, message=NOT_OWNER_MESSAGE)
    return AuthResult(uid=uid)
