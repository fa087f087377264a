"""Fixed-window rate limiting for callers and for the GitHub API.

Two independent budgets:

- per client: ``client_per_minute`` requests per 60s window, keyed by an
  opaque client id;
- upstream: one process-wide counter of GitHub calls per hour, corrected
  from GitHub's ``x-ratelimit-*`` headers whenever a response arrives.

All methods are synchronous; under a single event loop each check-then-
increment runs without interleaving.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from datetime import UTC, datetime

from repo_ranker.config import RateLimitSettings
from repo_ranker.errors import RateLimitExceededError
from repo_ranker.models import GitHubRateLimit, RateLimitInfo, RateLimitWindow, UpstreamBudget

logger = logging.getLogger(__name__)


def _as_datetime(epoch: float) -> datetime:
    return datetime.fromtimestamp(epoch, tz=UTC)


class RateLimiter:
    """Client and GitHub request budgets for one server process."""

    def __init__(
        self,
        settings: RateLimitSettings | None = None,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.settings = settings or RateLimitSettings()
        self._clock = clock
        self._clients: dict[str, RateLimitWindow] = {}
        # Expired from the start: the first check opens a fresh window.
        self._github = UpstreamBudget(count=0, reset_time=clock())

    # ── Client budget ─────────────────────────────────────────

    def check_client_rate_limit(self, client_id: str | None) -> bool:
        """Count one request for ``client_id``.

        Raises:
            RateLimitExceededError: When the client used up its window.
        """
        key = client_id or ""
        now = self._clock()
        window_s = self.settings.client_window_seconds

        window = self._clients.get(key)
        if window is None:
            window = RateLimitWindow(client_id=key, count=0, reset_time=now + window_s)
            self._clients[key] = window

        if now >= window.reset_time:
            window.count = 0
            window.reset_time = now + window_s

        if window.count >= self.settings.client_per_minute:
            reset = _as_datetime(window.reset_time)
            logger.warning("Rate limit exceeded for client %r", key)
            raise RateLimitExceededError(
                f"Rate limit exceeded. Try again after {reset.isoformat()}",
                scope="client",
                reset_time=reset,
            )

        window.count += 1
        return True

    def get_client_limit_info(self, client_id: str | None) -> RateLimitInfo:
        limit = self.settings.client_per_minute
        window = self._clients.get(client_id or "")
        if window is None:
            return RateLimitInfo(
                requests_made=0,
                requests_remaining=limit,
                reset_time=_as_datetime(self._clock() + self.settings.client_window_seconds),
            )
        return RateLimitInfo(
            requests_made=window.count,
            requests_remaining=max(0, limit - window.count),
            reset_time=_as_datetime(window.reset_time),
        )

    # ── GitHub budget ─────────────────────────────────────────

    def check_github_api_limit(self) -> bool:
        """Count one outbound GitHub call.

        Raises:
            RateLimitExceededError: When the hourly GitHub budget is spent.
        """
        now = self._clock()
        if now >= self._github.reset_time:
            self._github.count = 0
            self._github.reset_time = now + self.settings.github_window_seconds

        if self._github.count >= self.settings.github_per_hour:
            reset = _as_datetime(self._github.reset_time)
            logger.error("GitHub API rate limit exceeded (resets at %s)", reset.isoformat())
            raise RateLimitExceededError(
                f"GitHub API rate limit exceeded. Try again after {reset.isoformat()}",
                scope="github",
                reset_time=reset,
            )

        self._github.count += 1
        return True

    def update_github_api_usage(self, rate_limit: GitHubRateLimit) -> None:
        """Overwrite the local estimate with GitHub's own numbers.

        GitHub's ``used`` replaces the local count even when it is lower than
        what local increments produced.
        """
        if rate_limit.reset:
            self._github.reset_time = float(rate_limit.reset)
        self._github.count = rate_limit.used
        logger.debug(
            "GitHub API usage updated: %d used, %d remaining, resets at %s",
            rate_limit.used,
            rate_limit.remaining,
            _as_datetime(self._github.reset_time).isoformat(),
        )

    def get_github_limit_info(self) -> RateLimitInfo:
        return RateLimitInfo(
            requests_made=self._github.count,
            requests_remaining=max(0, self.settings.github_per_hour - self._github.count),
            reset_time=_as_datetime(self._github.reset_time),
        )

    # ── Housekeeping ──────────────────────────────────────────

    def cleanup(self) -> int:
        """Drop client windows that expired more than ``client_entry_max_age_seconds`` ago."""
        cutoff = self._clock() - self.settings.client_entry_max_age_seconds
        stale = [key for key, window in self._clients.items() if window.reset_time < cutoff]
        for key in stale:
            del self._clients[key]
        if stale:
            logger.debug("Cleaned up %d old rate limit entries", len(stale))
        return len(stale)

    def get_stats(self) -> dict[str, object]:
        return {
            "active_clients": len(self._clients),
            "github_api": self.get_github_limit_info().to_dict(),
            "limits": {
                "client_per_minute": self.settings.client_per_minute,
                "github_per_hour": self.settings.github_per_hour,
                "search_per_minute": self.settings.search_per_minute,
            },
        }
