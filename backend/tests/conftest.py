from __future__ import annotations

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import httpx
import pytest

# Ensure `backend/` is on sys.path so `import codehub_oauth.*` works reliably across pytest import modes.
BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from codehub_oauth.services.oauth_state import InMemoryStateStore  # noqa: E402
from codehub_oauth.settings import Settings  # noqa: E402

CLIENT_ID = "test-client-id"
CLIENT_SECRET = "test-client-secret-value"
FRONTEND_URL = "https://dash.example.com"


class FakeClock:
    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


class GitHubStub:
    """Stands in for github.com and api.github.com, recording every request."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.token_status = 200
        self.token_body: object = {
            "access_token": "gho_exampletoken",
            "scope": "read:user,user:email,repo",
        }
        self.user_status = 200
        self.user_body: object = {
            "id": 583231,
            "login": "octocat",
            "name": "The Octocat",
            "avatar_url": "https://avatars.githubusercontent.com/u/583231?v=4",
            "email": "octocat@example.com",
        }
        self.token_exc: Exception | None = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.host == "github.com" and request.url.path == "/login/oauth/access_token":
            if self.token_exc is not None:
                raise self.token_exc
            return httpx.Response(self.token_status, json=self.token_body)
        if request.url.host == "api.github.com" and request.url.path == "/user":
            return httpx.Response(self.user_status, json=self.user_body)
        raise AssertionError(f"unexpected request: {request.method} {request.url!s}")

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(clock: FakeClock) -> InMemoryStateStore:
    return InMemoryStateStore(ttl=timedelta(minutes=10), now_fn=clock)


@pytest.fixture
def github() -> GitHubStub:
    return GitHubStub()


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        _env_file=None,
        github_client_id=CLIENT_ID,
        github_client_secret=CLIENT_SECRET,
        frontend_url=FRONTEND_URL,
        server_port=3001,
        cors_origins="http://localhost:5173",
    )
