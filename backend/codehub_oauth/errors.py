from __future__ import annotations


class OAuthProxyError(Exception):
    """Failure that is reported to the caller as ``{"error": ..., "success": false}``.

    ``message`` is what the caller sees, so it must never carry credentials
    or state-store internals.
    """

    status_code = 500
    default_message = "OAuth request failed"

    def __init__(self, message: str | None = None, *, status_code: int | None = None) -> None:
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class MissingParameterError(OAuthProxyError):
    status_code = 400
    default_message = "Missing code or state parameter"


class InvalidStateError(OAuthProxyError):
    # Unknown, expired and replayed states all look the same from outside.
    status_code = 400
    default_message = "Invalid or expired state parameter"


class UpstreamError(OAuthProxyError):
    status_code = 500
    default_message = "Failed to exchange code for access token"


class MissingTokenError(OAuthProxyError):
    status_code = 400
    default_message = "No access token received from GitHub"


class ProfileFetchFailedError(OAuthProxyError):
    status_code = 500
    default_message = "Failed to verify access token"


class OAuthNotConfiguredError(OAuthProxyError):
    status_code = 500
    default_message = "GitHub OAuth is not configured"


class InternalError(OAuthProxyError):
    status_code = 500
    default_message = "Internal server error"
