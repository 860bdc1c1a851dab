from __future__ import annotations

from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_BACKEND_DIR = Path(__file__).resolve().parents[1]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="CODEHUB_",
        env_file=(str(_BACKEND_DIR / ".env"), ".env", "backend/.env"),
        extra="ignore",
        populate_by_name=True,
    )

    # The unprefixed names are what existing deployments already export.
    github_client_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("CODEHUB_GITHUB_CLIENT_ID", "GITHUB_CLIENT_ID", "github_client_id"),
    )
    github_client_secret: str | None = Field(
        default=None,
        validation_alias=AliasChoices("CODEHUB_GITHUB_CLIENT_SECRET", "GITHUB_CLIENT_SECRET", "github_client_secret"),
    )
    frontend_url: str = Field(
        default="http://localhost:5173",
        validation_alias=AliasChoices("CODEHUB_FRONTEND_URL", "FRONTEND_URL", "frontend_url"),
    )
    server_host: str = "127.0.0.1"
    server_port: int = Field(
        default=3001,
        validation_alias=AliasChoices("CODEHUB_SERVER_PORT", "SERVER_PORT", "server_port"),
    )
    cors_origins: str = "http://localhost:8082,http://localhost:3000,http://localhost:5173"

    oauth_state_ttl_seconds: int = 600
    oauth_state_sweep_interval_seconds: float = 600.0
    provider_timeout_seconds: float = 5.0
    user_agent: str = "CodeHubDashboard/1.0"
    log_level: str = "info"

    @property
    def github_configured(self) -> bool:
        return bool((self.github_client_id or "").strip() and (self.github_client_secret or "").strip())


settings = Settings()
