"""
Sync coordination between the composition pipeline and its listeners.

One SyncManager per owner (no module-level singleton). sync() is not
re-entrant: a call made while a sync is running returns immediately.
"""

from __future__ import annotations

import inspect
import logging
import time
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)

SyncCallback = Callable[[], None] | Callable[[], Awaitable[None]]


class SyncManager:
    """Runs a refresh and notifies subscribers once it completes."""

    def __init__(
        self,
        refresh: Callable[[], Awaitable[None]] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._refresh = refresh
        self._clock = clock
        self._callbacks: list[SyncCallback] = []
        self._syncing = False
        self.last_update: float | None = None

    @property
    def is_syncing(self) -> bool:
        return self._syncing

    def subscribe(self, callback: SyncCallback) -> Callable[[], None]:
        """Register a callback; returns a function that unregisters it."""
        self._callbacks.append(callback)

        def unsubscribe() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return unsubscribe

    async def sync(self) -> bool:
        """
        Refresh, then notify every subscriber.
        Returns False when skipped because another sync is running.
        A subscriber that raises is logged and does not stop the others.
        """
        if self._syncing:
            return False

        self._syncing = True
        try:
            logger.info("sync: starting content sync")
            if self._refresh is not None:
                await self._refresh()
            self.last_update = self._clock()

            for callback in list(self._callbacks):
                try:
                    result = callback()
                    if inspect.isawaitable(result):
                        await result
                except Exception:
                    logger.exception("sync: subscriber callback failed")

            logger.info("sync: content sync completed (%d subscribers)", len(self._callbacks))
            return True
        finally:
            self._syncing = False
