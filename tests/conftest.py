"""Shared test infrastructure for the logici-client test suite.

Provides:
- isolated_settings: fresh Settings per test, session file under tmp_path
- token_store / session: file-backed session in a temp directory
- make_client: factory for ApiClient wired to an httpx.MockTransport
- json_response: shorthand for building httpx.Response objects
"""

import json

import httpx
import pytest

from logici_client.app.config import get_settings
from logici_client.infra.http import ApiClient
from logici_client.infra.session import Session, TokenStore

BASE_URL = "https://backend.test"


# ---------------------------------------------------------------------------
# Settings isolation
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Point the session file at tmp_path and drop any cached Settings."""
    monkeypatch.setenv("LOGICI_SESSION_FILE", str(tmp_path / "session.json"))
    monkeypatch.setenv("LOGICI_BACKEND_URL", BASE_URL)
    get_settings.cache_clear()
    yield get_settings()
    get_settings.cache_clear()


# ---------------------------------------------------------------------------
# Session fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def token_store(tmp_path) -> TokenStore:
    return TokenStore(tmp_path / "session.json")


@pytest.fixture
def session(token_store) -> Session:
    return Session(store=token_store)


# ---------------------------------------------------------------------------
# HTTP fixtures
# ---------------------------------------------------------------------------

def json_response(payload=None, status_code: int = 200) -> httpx.Response:
    """Build an httpx.Response carrying *payload* as JSON."""
    return httpx.Response(status_code, json=payload if payload is not None else {})


@pytest.fixture
async def make_client(session):
    """Factory that builds an ApiClient whose requests go to *handler*.

    Usage:
        client = make_client(lambda request: json_response({"success": True}))

    Every request seen is appended to ``client.requests``.
    """
    clients: list[ApiClient] = []

    def _factory(handler, *, client_session: Session | None = None) -> ApiClient:
        requests: list[httpx.Request] = []

        async def _recording_handler(request: httpx.Request):
            requests.append(request)
            result = handler(request)
            if hasattr(result, "__await__"):
                result = await result
            return result

        client = ApiClient(
            session=client_session or session,
            base_url=BASE_URL,
            transport=httpx.MockTransport(_recording_handler),
        )
        client.requests = requests
        clients.append(client)
        return client

    yield _factory

    for client in clients:
        await client.aclose()


def request_json(request: httpx.Request):
    """Decoded JSON body of a captured request."""
    return json.loads(request.content.decode("utf-8")) if request.content else None
