import pytest
from fastapi.testclient import TestClient

from finease.core.errors import InvalidCredential, Unauthenticated
from finease.core.security import bearer_token, identity_from_claims
from finease.main import create_app

VALID_ID = "65a1b2c3d4e5f60718293a4b"

MALFORMED_JSON = b"{not json"

# (method, path, raw body)
PROTECTED = [
    ("GET", "/my-transaction?email=a@x.com", None),
    ("GET", f"/my-transaction/{VALID_ID}", None),
    ("POST", "/my-transaction", b'{"amount": 10}'),
    ("POST", "/my-transaction", MALFORMED_JSON),
    ("PUT", f"/my-transaction/{VALID_ID}", b'{"amount": 20}'),
    ("PUT", f"/my-transaction/{VALID_ID}", MALFORMED_JSON),
    ("DELETE", f"/my-transaction/{VALID_ID}", None),
]

def _send(client, method, path, body, headers=None):
    headers = {"Content-Type": "application/json", **(headers or {})}
    return client.request(method, path, content=body, headers=headers)

@pytest.mark.parametrize("method,path,body", PROTECTED)
def test_missing_header_is_401_and_store_untouched(client, store, method, path, body):
    res = _send(client, method, path, body)
    assert res.status_code == 401
    assert res.json() == {"message": "Unauthorized: No token provided"}
    assert store.calls == []

@pytest.mark.parametrize("header", ["token-alice", "Token token-alice", "bearer token-alice", "Bearer ", "Bearer    "])
def test_malformed_header_is_401(client, store, verifier, header):
    res = client.get("/my-transaction", params={"email": "a@x.com"}, headers={"Authorization": header})
    assert res.status_code == 401
    assert verifier.seen == []
    assert store.calls == []

@pytest.mark.parametrize("method,path,body", PROTECTED)
def test_rejected_token_is_401_with_generic_message(client, store, method, path, body):
    res = _send(client, method, path, body, {"Authorization": "Bearer forged"})
    assert res.status_code == 401
    assert res.json() == {"message": "Invalid or expired token"}
    assert store.calls == []

def test_verifier_not_ready_is_503(client, verifier, as_alice, store):
    verifier.ready = False
    res = client.get("/my-transaction", params={"email": "a@x.com"}, headers=as_alice)
    assert res.status_code == 503
    assert "Firebase not initialized" in res.json()["message"]
    assert verifier.seen == []
    assert store.calls == []

@pytest.mark.parametrize("method,path,body", PROTECTED)
def test_verifier_not_ready_wins_over_any_body(client, verifier, store, method, path, body):
    verifier.ready = False
    res = _send(client, method, path, body, {"Authorization": "Bearer token-alice"})
    assert res.status_code == 503
    assert store.calls == []

def test_no_verifier_is_503_even_without_header(settings, store):
    client = TestClient(create_app(settings, store=store, verifier=None))
    res = client.get("/my-transaction", params={"email": "a@x.com"})
    assert res.status_code == 503

def test_identity_attached_before_controller_runs(client, verifier, as_alice):
    res = client.get("/my-transaction", params={"email": "a@x.com"}, headers=as_alice)
    assert res.status_code == 200
    assert verifier.seen == ["token-alice"]

def test_greeting_needs_no_auth(client):
    res = client.get("/")
    assert res.status_code == 200
    assert res.text == "Hello FinEase Server! Running"

def test_healthz(client):
    assert client.get("/healthz").json() == {"status": "ok"}

class TestBearerToken:
    def test_extracts_token(self):
        assert bearer_token("Bearer abc.def.ghi") == "abc.def.ghi"

    @pytest.mark.parametrize("header", [None, "", "Basic dXNlcjpwdw==", "Bearer", "Bearer  "])
    def test_rejects(self, header):
        with pytest.raises(Unauthenticated):
            bearer_token(header)

class TestIdentityFromClaims:
    def test_uses_email_and_uid(self):
        identity = identity_from_claims({"email": "a@x.com", "uid": "u1", "name": "A"})
        assert identity.email == "a@x.com"
        assert identity.uid == "u1"
        assert identity.claims["name"] == "A"

    def test_token_without_email_is_rejected(self):
        with pytest.raises(InvalidCredential):
            identity_from_claims({"uid": "phone-user"})
