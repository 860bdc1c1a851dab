from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ErrorOut(BaseModel):
    error: str
    success: bool = False


class AuthorizeUrlOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    auth_url: str = Field(alias="authUrl")
    state: str
    success: bool = True


class TokenExchangeRequest(BaseModel):
    # Both optional so that a missing field is reported as a missing parameter, not a 422.
    code: Optional[str] = None
    state: Optional[str] = None


class GitHubUserOut(BaseModel):
    login: Optional[str] = None
    name: Optional[str] = None
    avatar_url: Optional[str] = None
    id: Optional[int] = None


class TokenExchangeOut(BaseModel):
    access_token: str
    token_type: str = "bearer"
    scope: Optional[str] = None
    user: GitHubUserOut
    success: bool = True


class HealthEnvironmentOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    has_github_client_id: bool = Field(alias="hasGitHubClientId")
    has_github_client_secret: bool = Field(alias="hasGitHubClientSecret")
    frontend_url: str = Field(alias="frontendUrl")
    port: int


class HealthOut(BaseModel):
    status: str = "OK"
    timestamp: datetime
    oauth_configured: bool
    environment: HealthEnvironmentOut
