"""
Shared fixtures.

No test talks to MongoDB or Firebase: the app is built with an in-memory
store that records every storage call, and a verifier that knows a fixed set
of tokens.
"""

import pytest
from fastapi.testclient import TestClient

from finease.core.config import Settings
from finease.core.errors import InvalidCredential
from finease.core.security import Identity
from finease.db.memory import InMemoryTransactionStore
from finease.main import create_app

ALICE = "a@x.com"
BOB = "b@x.com"

TOKENS = {
    "token-alice": ALICE,
    "token-bob": BOB,
}

class FakeVerifier:
    def __init__(self, tokens: dict[str, str], ready: bool = True):
        self.tokens = tokens
        self.ready = ready
        self.seen: list[str] = []

    async def verify(self, token: str) -> Identity:
        self.seen.append(token)
        if token not in self.tokens:
            raise InvalidCredential()
        return Identity(email=self.tokens[token], uid=f"uid-{token}")

class SpyStore(InMemoryTransactionStore):
    """In-memory store that remembers which storage operations were called."""

    def __init__(self):
        super().__init__()
        self.calls: list[str] = []

    async def find(self, filter, sort=None):
        self.calls.append("find")
        return await super().find(filter, sort)

    async def find_one(self, filter):
        self.calls.append("find_one")
        return await super().find_one(filter)

    async def insert_one(self, doc):
        self.calls.append("insert_one")
        return await super().insert_one(doc)

    async def update_one(self, filter, fields):
        self.calls.append("update_one")
        return await super().update_one(filter, fields)

    async def delete_one(self, filter):
        self.calls.append("delete_one")
        return await super().delete_one(filter)

@pytest.fixture
def settings():
    return Settings(APP_NAME="FinEase Server", STORAGE_BACKEND="memory", CORS_ORIGINS="*")

@pytest.fixture
def store():
    return SpyStore()

@pytest.fixture
def verifier():
    return FakeVerifier(TOKENS)

@pytest.fixture
def alice():
    return Identity(email=ALICE)

@pytest.fixture
def bob():
    return Identity(email=BOB)

@pytest.fixture
def client(settings, store, verifier):
    # No `with`: lifespan does not run, so the injected collaborators are used as-is
    return TestClient(create_app(settings, store=store, verifier=verifier))

@pytest.fixture
def as_alice():
    return {"Authorization": "Bearer token-alice"}

@pytest.fixture
def as_bob():
    return {"Authorization": "Bearer token-bob"}
