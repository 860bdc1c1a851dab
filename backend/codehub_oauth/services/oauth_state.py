from __future__ import annotations

import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from threading import Lock
from typing import Callable, Protocol

DEFAULT_STATE_TTL = timedelta(minutes=10)


class StateError(Exception):
    """A state token failed validation."""


class UnknownStateError(StateError):
    pass


class StateAlreadyConsumedError(StateError):
    pass


class StateExpiredError(StateError):
    pass


@dataclass
class StateEntry:
    token: str
    issued_at: datetime
    consumed: bool = False


class StateStore(Protocol):
    def issue(self) -> str: ...

    def validate_and_consume(self, token: str) -> None: ...

    def discard(self, token: str) -> None: ...

    def sweep(self, now: datetime | None = None) -> int: ...


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryStateStore:
    """Process-local registry of single-use OAuth state tokens.

    Entries stay in the map after consumption so that a replay is reported as
    already consumed; they are removed by :meth:`discard` once the exchange
    succeeds, or by :meth:`sweep` once they are older than the TTL. Nothing
    here survives a restart or is shared between processes.
    """

    def __init__(
        self,
        *,
        ttl: timedelta = DEFAULT_STATE_TTL,
        now_fn: Callable[[], datetime] | None = None,
    ) -> None:
        if ttl <= timedelta(0):
            raise ValueError("OAuth state TTL must be positive")
        self._ttl = ttl
        self._now = now_fn or _utcnow
        self._entries: dict[str, StateEntry] = {}
        self._lock = Lock()

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    def issue(self) -> str:
        issued_at = self._now()
        with self._lock:
            token = secrets.token_urlsafe(32)
            while token in self._entries:
                token = secrets.token_urlsafe(32)
            self._entries[token] = StateEntry(token=token, issued_at=issued_at)
        return token

    def validate_and_consume(self, token: str) -> None:
        now = self._now()
        with self._lock:
            entry = self._entries.get(token)
            if entry is None:
                raise UnknownStateError(token)
            if entry.consumed:
                raise StateAlreadyConsumedError(token)
            if now - entry.issued_at > self._ttl:
                # Expired but not yet swept; burn it so it cannot be retried.
                entry.consumed = True
                raise StateExpiredError(token)
            entry.consumed = True

    def discard(self, token: str) -> None:
        with self._lock:
            self._entries.pop(token, None)

    def sweep(self, now: datetime | None = None) -> int:
        moment = now or self._now()
        with self._lock:
            expired = [
                key
                for key, entry in self._entries.items()
                if moment - entry.issued_at > self._ttl
            ]
            for key in expired:
                del self._entries[key]
        return len(expired)

    def get(self, token: str) -> StateEntry | None:
        with self._lock:
            entry = self._entries.get(token)
            if entry is None:
                return None
            return StateEntry(token=entry.token, issued_at=entry.issued_at, consumed=entry.consumed)

    def __contains__(self, token: object) -> bool:
        with self._lock:
            return token in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
