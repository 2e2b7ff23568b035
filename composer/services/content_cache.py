"""
Time-bounded content cache.

Entries are shared read-only by every reader and invalidated purely by age;
writes to the CMS do not signal the cache, so readers may see stale content up
to max_age. The clock is injected so tests control time.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


@dataclass
class _CacheEntry:
    data: Any
    stored_at: float


class ContentCache:
    """Key → value store whose entries expire max_age seconds after being set."""

    def __init__(self, max_age: float = 600.0, clock: Clock = time.monotonic) -> None:
        if max_age <= 0:
            raise ValueError(f"max_age must be positive, got {max_age}")
        self.max_age = max_age
        self._clock = clock
        self._entries: dict[str, _CacheEntry] = {}

    def set(self, key: str, data: Any) -> None:
        self._entries[key] = _CacheEntry(data=data, stored_at=self._clock())

    def get(self, key: str) -> Any | None:
        entry = self._fresh(key)
        if entry is None:
            logger.debug("content_cache: miss %s", key)
            return None
        logger.debug("content_cache: hit %s", key)
        return entry.data

    def has(self, key: str) -> bool:
        return self._fresh(key) is not None

    def invalidate(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def _fresh(self, key: str) -> _CacheEntry | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() - entry.stored_at > self.max_age:
            del self._entries[key]
            return None
        return entry


def should_refresh(last_update: float | None, max_age: float, now: float) -> bool:
    """True when content was never fetched or is older than max_age."""
    if last_update is None:
        return True
    return now - last_update > max_age
