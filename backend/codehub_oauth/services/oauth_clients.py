from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlencode

import httpx

from codehub_oauth.errors import (
    InvalidStateError,
    MissingParameterError,
    MissingTokenError,
    OAuthNotConfiguredError,
    ProfileFetchFailedError,
    UpstreamError,
)
from codehub_oauth.services.oauth_state import StateError, StateStore
from codehub_oauth.settings import Settings

_log = logging.getLogger(__name__)


@dataclass(frozen=True)
class OAuthProviderConfig:
    provider: str
    authorize_url: str
    token_url: str
    user_url: str
    scopes: tuple[str, ...]
    callback_path: str


GITHUB = OAuthProviderConfig(
    provider="github",
    authorize_url="https://github.com/login/oauth/authorize",
    token_url="https://github.com/login/oauth/access_token",
    user_url="https://api.github.com/user",
    scopes=("read:user", "user:email", "repo"),
    callback_path="/auth/github/callback",
)

_PROVIDERS: dict[str, OAuthProviderConfig] = {GITHUB.provider: GITHUB}


def provider_config(provider: str) -> OAuthProviderConfig | None:
    return _PROVIDERS.get(provider.lower().strip())


def _as_str(value: Any) -> str | None:
    if value is None:
        return None
    return str(value)


def _as_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _as_scope(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        return ",".join(str(v) for v in value)
    return str(value)


@dataclass(frozen=True)
class ProviderCredentials:
    client_id: str
    client_secret: str
    redirect_uri: str

    @property
    def is_configured(self) -> bool:
        return bool(self.client_id and self.client_secret)

    @classmethod
    def from_settings(cls, settings: Settings, provider: OAuthProviderConfig = GITHUB) -> "ProviderCredentials":
        return cls(
            client_id=(settings.github_client_id or "").strip(),
            client_secret=(settings.github_client_secret or "").strip(),
            redirect_uri=f"{settings.frontend_url.rstrip('/')}{provider.callback_path}",
        )


@dataclass(frozen=True)
class AuthorizeResult:
    authorize_url: str
    state: str


@dataclass(frozen=True)
class GitHubUser:
    id: int | None
    login: str | None
    name: str | None
    avatar_url: str | None


@dataclass(frozen=True)
class ExchangeResult:
    access_token: str
    token_type: str
    scope: str | None
    user: GitHubUser


class GitHubOAuthFlow:
    """Authorize-URL construction and the code -> token -> profile exchange.

    Every exchange that gets past state validation makes exactly two
    outbound calls. A state is consumed before the first call and is never
    given back, even when a later step fails.
    """

    def __init__(
        self,
        credentials: ProviderCredentials,
        state_store: StateStore,
        *,
        provider: OAuthProviderConfig = GITHUB,
        timeout: float = 5.0,
        user_agent: str = "CodeHubDashboard/1.0",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._credentials = credentials
        self._store = state_store
        self._provider = provider
        self._timeout = timeout
        self._user_agent = user_agent
        self._transport = transport

    @property
    def provider(self) -> OAuthProviderConfig:
        return self._provider

    @property
    def is_configured(self) -> bool:
        return self._credentials.is_configured

    def _require_configured(self) -> None:
        if not self._credentials.is_configured:
            raise OAuthNotConfiguredError()

    def build_authorization_url(self) -> AuthorizeResult:
        self._require_configured()
        state = self._store.issue()
        params = {
            "client_id": self._credentials.client_id,
            "redirect_uri": self._credentials.redirect_uri,
            "scope": " ".join(self._provider.scopes),
            "state": state,
            "response_type": "code",
        }
        return AuthorizeResult(
            authorize_url=f"{self._provider.authorize_url}?{urlencode(params)}",
            state=state,
        )

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self._timeout, transport=self._transport)

    async def exchange_code(self, *, code: str | None, state: str | None) -> ExchangeResult:
        if not code or not state:
            raise MissingParameterError()
        self._require_configured()

        try:
            self._store.validate_and_consume(state)
        except StateError as e:
            _log.info("Rejected OAuth state (%s)", type(e).__name__)
            raise InvalidStateError() from e

        async with self._client() as client:
            token_data = await self._request_token(client, code)
            access_token = str(token_data.get("access_token") or "").strip()
            if not access_token:
                raise MissingTokenError()
            user_data = await self._fetch_user(client, access_token)

        self._store.discard(state)
        return ExchangeResult(
            access_token=access_token,
            token_type=str(token_data.get("token_type") or "bearer"),
            scope=_as_scope(token_data.get("scope")),
            user=GitHubUser(
                id=_as_int(user_data.get("id")),
                login=_as_str(user_data.get("login")),
                name=_as_str(user_data.get("name")),
                avatar_url=_as_str(user_data.get("avatar_url")),
            ),
        )

    async def _request_token(self, client: httpx.AsyncClient, code: str) -> dict[str, Any]:
        payload = {
            "client_id": self._credentials.client_id,
            "client_secret": self._credentials.client_secret,
            "code": code,
            "redirect_uri": self._credentials.redirect_uri,
        }
        headers = {
            "Accept": "application/json",
            "User-Agent": self._user_agent,
        }
        try:
            resp = await client.post(self._provider.token_url, json=payload, headers=headers)
        except httpx.HTTPError as e:
            _log.warning("GitHub token endpoint unreachable: %s", e)
            raise UpstreamError() from e
        if not resp.is_success:
            _log.warning("GitHub token endpoint responded with %s", resp.status_code)
            raise UpstreamError()
        try:
            data = resp.json()
        except ValueError as e:
            _log.warning("GitHub token endpoint returned a non-JSON body")
            raise UpstreamError() from e
        if not isinstance(data, dict):
            raise UpstreamError()
        if data.get("error"):
            description = str(data.get("error_description") or data.get("error"))
            _log.warning("GitHub rejected the authorization code: %s", data.get("error"))
            raise UpstreamError(description, status_code=400)
        return data

    async def _fetch_user(self, client: httpx.AsyncClient, access_token: str) -> dict[str, Any]:
        headers = {
            "Authorization": f"Bearer {access_token}",
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": self._user_agent,
        }
        try:
            resp = await client.get(self._provider.user_url, headers=headers)
        except httpx.HTTPError as e:
            _log.warning("GitHub user endpoint unreachable: %s", e)
            raise ProfileFetchFailedError() from e
        if not resp.is_success:
            _log.warning("GitHub user endpoint responded with %s", resp.status_code)
            raise ProfileFetchFailedError()
        try:
            data = resp.json()
        except ValueError as e:
            raise ProfileFetchFailedError() from e
        if not isinstance(data, dict):
            raise ProfileFetchFailedError()
        return data
