from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from codehub_oauth.deps import get_settings
from codehub_oauth.schemas import HealthEnvironmentOut, HealthOut
from codehub_oauth.settings import Settings

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthOut)
def health(settings: Settings = Depends(get_settings)):
    # Presence flags only; credential values never leave the process.
    return HealthOut(
        timestamp=datetime.now(timezone.utc),
        oauth_configured=settings.github_configured,
        environment=HealthEnvironmentOut(
            has_github_client_id=bool((settings.github_client_id or "").strip()),
            has_github_client_secret=bool((settings.github_client_secret or "").strip()),
            frontend_url=settings.frontend_url,
            port=settings.server_port,
        ),
    )
