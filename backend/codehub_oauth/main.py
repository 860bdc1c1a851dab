from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import timedelta

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from codehub_oauth.errors import MissingParameterError, OAuthProxyError
from codehub_oauth.routers import health, oauth
from codehub_oauth.services.oauth_clients import GitHubOAuthFlow, ProviderCredentials
from codehub_oauth.services.oauth_state import InMemoryStateStore, StateStore
from codehub_oauth.services.state_sweeper import StateSweeper
from codehub_oauth.settings import Settings, settings as default_settings

_log = logging.getLogger(__name__)

_ENDPOINTS = (
    "GET  /api/health",
    "GET  /api/oauth/github/url",
    "POST /api/oauth/github/token",
)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message, "success": False})


def _log_configuration(settings: Settings) -> None:
    _log.info("GITHUB_CLIENT_ID: %s", "Set" if (settings.github_client_id or "").strip() else "Missing")
    _log.info("GITHUB_CLIENT_SECRET: %s", "Set" if (settings.github_client_secret or "").strip() else "Missing")
    _log.info("FRONTEND_URL: %s", settings.frontend_url)
    _log.info("PORT: %s", settings.server_port)
    if not settings.github_configured:
        _log.warning("GitHub OAuth credentials missing; token endpoints will fail until they are set")
    for endpoint in _ENDPOINTS:
        _log.info("Endpoint available: %s", endpoint)


@asynccontextmanager
async def lifespan(app: FastAPI):
    _log_configuration(app.state.settings)
    sweeper: StateSweeper = app.state.oauth_state_sweeper
    sweeper.start()
    try:
        yield
    finally:
        await sweeper.stop()


def _install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(OAuthProxyError)
    async def _oauth_error(_request: Request, exc: OAuthProxyError):
        return _error(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def _validation_error(_request: Request, _exc: RequestValidationError):
        return _error(400, MissingParameterError.default_message)

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(_request: Request, exc: StarletteHTTPException):
        if exc.status_code in (404, 405):
            return _error(404, "Endpoint not found")
        return _error(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def _unhandled_error(_request: Request, exc: Exception):
        _log.error("Server error: %s", exc, exc_info=exc)
        return _error(500, "Internal server error")


def create_app(
    settings: Settings | None = None,
    *,
    state_store: StateStore | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    settings = settings or default_settings
    app = FastAPI(title="CodeHub OAuth API", version="0.1.0", lifespan=lifespan)

    store = state_store
    if store is None:
        store = InMemoryStateStore(ttl=timedelta(seconds=settings.oauth_state_ttl_seconds))
    app.state.settings = settings
    app.state.oauth_state_store = store
    app.state.oauth_state_sweeper = StateSweeper(store, interval=settings.oauth_state_sweep_interval_seconds)
    app.state.oauth_flow = GitHubOAuthFlow(
        ProviderCredentials.from_settings(settings),
        store,
        timeout=settings.provider_timeout_seconds,
        user_agent=settings.user_agent,
        transport=transport,
    )

    origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
    )

    _install_error_handlers(app)

    app.include_router(health.router, prefix="/api")
    app.include_router(oauth.router, prefix="/api")

    return app


app = create_app()
