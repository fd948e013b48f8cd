"""
Access gate: turns the Authorization header into a caller Identity.

Every protected route depends on `get_current_identity`. Nothing downstream
(controller, store) runs unless it returns.
"""

import base64
import json
import logging
from typing import Any, Optional, Protocol

import firebase_admin
from fastapi import Request
from fastapi.concurrency import run_in_threadpool
from firebase_admin import auth, credentials
from firebase_admin.exceptions import FirebaseError
from pydantic import BaseModel, Field

from finease.core.errors import InvalidCredential, ServiceUnavailable, Unauthenticated

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "

class Identity(BaseModel):
    email: str
    uid: Optional[str] = None
    claims: dict[str, Any] = Field(default_factory=dict)

class IdentityVerifier(Protocol):
    ready: bool

    async def verify(self, token: str) -> Identity:
        """Return the caller's identity or raise InvalidCredential."""
        ...

class FirebaseVerifier:
    """Verifies Firebase ID tokens with the Admin SDK."""

    def __init__(self, app: Optional[firebase_admin.App]):
        self._app = app

    @property
    def ready(self) -> bool:
        return self._app is not None

    @classmethod
    def from_service_account(cls, encoded: Optional[str], name: str = "finease") -> "FirebaseVerifier":
        """
        Initialize from a base64-encoded service-account JSON.

        Failure is not fatal for the process: it is logged and the verifier
        reports ready=False, so protected routes answer 503 instead of crashing.
        An app already registered under `name` (an earlier lifespan in the same
        process) is reused.
        """
        existing = _registered_app(name)
        if existing is not None:
            logger.info("Reusing Firebase Admin app %r (project=%s)", name, existing.project_id)
            return cls(existing)

        try:
            if not encoded:
                raise ValueError("FIREBASE_SERVICE_ACCOUNT environment variable is missing")
            service_account = json.loads(base64.b64decode(encoded).decode("utf-8"))
            app = firebase_admin.initialize_app(credentials.Certificate(service_account), name=name)
        except (ValueError, TypeError) as exc:
            # binascii.Error and json.JSONDecodeError are ValueErrors
            logger.error("Firebase Admin initialization failed: %s", exc)
            return cls(None)
        logger.info("Firebase Admin initialized (project=%s)", app.project_id)
        return cls(app)

    async def verify(self, token: str) -> Identity:
        if self._app is None:
            raise ServiceUnavailable("Server configuration error: Firebase not initialized")
        try:
            # verify_id_token may fetch Google's public certs: keep it off the event loop
            decoded = await run_in_threadpool(auth.verify_id_token, token, app=self._app)
        except (ValueError, FirebaseError) as exc:
            logger.warning("Token verification failed: %s", exc)
            raise InvalidCredential() from exc
        return identity_from_claims(decoded)

def _registered_app(name: str) -> Optional[firebase_admin.App]:
    try:
        return firebase_admin.get_app(name)
    except ValueError:
        # get_app raises ValueError when no app has that name
        return None

def identity_from_claims(claims: dict[str, Any]) -> Identity:
    email = claims.get("email")
    if not email:
        logger.warning("Token for uid=%s carries no email claim", claims.get("uid"))
        raise InvalidCredential()
    return Identity(email=email, uid=claims.get("uid"), claims=claims)

def bearer_token(header: Optional[str]) -> str:
    if not header or not header.startswith(BEARER_PREFIX):
        raise Unauthenticated()
    token = header[len(BEARER_PREFIX):].strip()
    if not token:
        raise Unauthenticated()
    return token

async def get_current_identity(request: Request) -> Identity:
    # FastAPI dependency used by every protected route.
    verifier: Optional[IdentityVerifier] = getattr(request.app.state, "verifier", None)
    if verifier is None or not verifier.ready:
        raise ServiceUnavailable("Server configuration error: Firebase not initialized")

    token = bearer_token(request.headers.get("Authorization"))
    identity = await verifier.verify(token)
    request.state.identity = identity
    return identity
