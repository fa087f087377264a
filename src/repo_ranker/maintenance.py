"""Periodic sweep of expired cache entries and stale rate-limit windows."""

from __future__ import annotations

import asyncio
import logging

from repo_ranker.cache.base import CachePort
from repo_ranker.ratelimit.base import RateLimiterPort

logger = logging.getLogger(__name__)


def cleanup_once(cache: CachePort, rate_limiter: RateLimiterPort) -> tuple[int, int]:
    """Run one sweep. Returns (cache entries removed, client windows removed)."""
    removed_entries = cache.cleanup()
    removed_windows = rate_limiter.cleanup()
    if removed_entries or removed_windows:
        logger.debug(
            "Maintenance sweep removed %d cache entries and %d client windows",
            removed_entries,
            removed_windows,
        )
    return removed_entries, removed_windows


async def run_periodic_cleanup(
    cache: CachePort,
    rate_limiter: RateLimiterPort,
    interval_seconds: float,
) -> None:
    """Sweep every ``interval_seconds`` until cancelled."""
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            cleanup_once(cache, rate_limiter)
        except Exception:
            logger.exception("Maintenance sweep failed")
