"""Port: request budgets for callers and for the GitHub API."""

from __future__ import annotations

from typing import Protocol

from repo_ranker.models import GitHubRateLimit, RateLimitInfo


class RateLimiterPort(Protocol):
    """Port for the two fixed-window budgets guarding a search.

    ``check_*`` methods raise ``RateLimitExceededError`` when a budget is spent.
    """

    def check_client_rate_limit(self, client_id: str | None) -> bool: ...

    def check_github_api_limit(self) -> bool: ...

    def update_github_api_usage(self, rate_limit: GitHubRateLimit) -> None: ...

    def get_client_limit_info(self, client_id: str | None) -> RateLimitInfo: ...

    def get_github_limit_info(self) -> RateLimitInfo: ...

    def cleanup(self) -> int: ...

    def get_stats(self) -> dict[str, object]: ...
