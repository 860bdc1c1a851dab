from __future__ import annotations

import asyncio
import logging
from datetime import datetime

from codehub_oauth.services.oauth_state import StateStore

_log = logging.getLogger(__name__)


class StateSweeper:
    """Background task that periodically evicts expired OAuth states."""

    def __init__(self, store: StateStore, *, interval: float) -> None:
        if interval <= 0:
            raise ValueError("sweep interval must be positive")
        self._store = store
        self._interval = interval
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def run_once(self, now: datetime | None = None) -> int:
        removed = self._store.sweep(now)
        if removed:
            _log.debug("Evicted %d expired OAuth state(s)", removed)
        return removed

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            try:
                self.run_once()
            except Exception:
                _log.exception("OAuth state sweep failed")

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._loop(), name="oauth-state-sweeper")

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
