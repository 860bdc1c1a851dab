from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException

from codehub_oauth.deps import get_oauth_flow
from codehub_oauth.errors import InternalError, OAuthProxyError
from codehub_oauth.schemas import AuthorizeUrlOut, ErrorOut, GitHubUserOut, TokenExchangeOut, TokenExchangeRequest
from codehub_oauth.services.oauth_clients import GitHubOAuthFlow, provider_config

_log = logging.getLogger(__name__)

router = APIRouter(prefix="/oauth", tags=["oauth"])

_ERROR_RESPONSES = {
    400: {"model": ErrorOut},
    404: {"model": ErrorOut},
    500: {"model": ErrorOut},
}


def _require_provider(provider: str, flow: GitHubOAuthFlow) -> None:
    config = provider_config(provider)
    if config is None or config.provider != flow.provider.provider:
        raise HTTPException(status_code=404, detail="Endpoint not found")


@router.get("/{provider}/url", response_model=AuthorizeUrlOut, responses=_ERROR_RESPONSES)
def authorize_url(provider: str, flow: GitHubOAuthFlow = Depends(get_oauth_flow)):
    _require_provider(provider, flow)
    try:
        result = flow.build_authorization_url()
    except OAuthProxyError:
        raise
    except Exception as e:
        _log.exception("Error generating OAuth URL")
        raise InternalError("Failed to generate OAuth URL") from e
    return AuthorizeUrlOut(auth_url=result.authorize_url, state=result.state)


@router.post("/{provider}/token", response_model=TokenExchangeOut, responses=_ERROR_RESPONSES)
async def exchange_token(
    provider: str,
    payload: Optional[TokenExchangeRequest] = Body(None),
    flow: GitHubOAuthFlow = Depends(get_oauth_flow),
):
    _require_provider(provider, flow)
    payload = payload or TokenExchangeRequest()
    try:
        result = await flow.exchange_code(code=payload.code, state=payload.state)
        return TokenExchangeOut(
            access_token=result.access_token,
            token_type=result.token_type,
            scope=result.scope,
            user=GitHubUserOut(
                login=result.user.login,
                name=result.user.name,
                avatar_url=result.user.avatar_url,
                id=result.user.id,
            ),
        )
    except OAuthProxyError:
        raise
    except Exception as e:
        _log.exception("OAuth token exchange error")
        raise InternalError("Failed to exchange code for access token") from e
