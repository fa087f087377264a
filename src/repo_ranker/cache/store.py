"""In-memory TTL cache for GitHub search responses."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Any

from repo_ranker.models import CacheEntry, CacheStats

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 300


def _valid_key(key: object) -> bool:
    return isinstance(key, str) and bool(key.strip())


class TTLCache:
    """Key/value store where every entry expires ``ttl`` seconds after it was set.

    Expired entries are only removed when read (``get``/``has``) or during an
    explicit ``cleanup`` sweep; there is no background eviction and no size cap.
    Malformed keys (None, non-string, blank) are treated as absent.
    """

    def __init__(
        self,
        default_ttl_seconds: float = DEFAULT_TTL_SECONDS,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.default_ttl_seconds = default_ttl_seconds
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def _live_entry(self, key: object) -> CacheEntry | None:
        if not _valid_key(key):
            return None
        entry = self._entries.get(key)  # type: ignore[arg-type]
        if entry is None:
            return None
        if self._clock() >= entry.expires_at:
            del self._entries[entry.key]
            logger.debug("Cache expired and removed: %s", entry.key)
            return None
        return entry

    def get(self, key: str, default: Any = None) -> Any:
        entry = self._live_entry(key)
        if entry is None:
            return default
        logger.debug("Cache hit: %s", key)
        return entry.value

    def has(self, key: str) -> bool:
        return self._live_entry(key) is not None

    def set(self, key: str, value: Any, ttl_seconds: float | None = None) -> None:
        if not _valid_key(key):
            logger.debug("Ignoring cache set for malformed key %r", key)
            return
        ttl = ttl_seconds if ttl_seconds and ttl_seconds > 0 else self.default_ttl_seconds
        expires_at = self._clock() + ttl
        self._entries[key] = CacheEntry(key=key, value=value, expires_at=expires_at)
        logger.debug("Cache set: %s (ttl=%ss)", key, ttl)

    def delete(self, key: str) -> bool:
        if not _valid_key(key):
            return False
        removed = self._entries.pop(key, None) is not None
        if removed:
            logger.debug("Cache deleted: %s", key)
        return removed

    def clear(self) -> None:
        self._entries.clear()
        logger.info("Cache cleared")

    def cleanup(self) -> int:
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if now >= entry.expires_at]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.info("Cleaned up %d expired cache entries", len(expired))
        return len(expired)

    def get_stats(self) -> CacheStats:
        now = self._clock()
        valid = sum(1 for entry in self._entries.values() if now < entry.expires_at)
        return CacheStats(total=len(self._entries), valid=valid, expired=len(self._entries) - valid)
