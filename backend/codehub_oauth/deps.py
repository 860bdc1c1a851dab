from __future__ import annotations

from fastapi import Request

from codehub_oauth.services.oauth_clients import GitHubOAuthFlow
from codehub_oauth.settings import Settings


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_oauth_flow(request: Request) -> GitHubOAuthFlow:
    return request.app.state.oauth_flow
