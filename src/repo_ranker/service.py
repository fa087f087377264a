"""Search orchestration: rate limits -> cache -> GitHub -> scoring -> cache."""

from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime
from typing import Any

from repo_ranker import __version__
from repo_ranker.cache.base import CachePort
from repo_ranker.cache.keys import generate_repository_key, generate_search_key
from repo_ranker.config import Settings
from repo_ranker.errors import InvalidSearchError
from repo_ranker.github.base import GitHubSearchPort
from repo_ranker.github.client import parse_full_name
from repo_ranker.models import SearchRequest
from repo_ranker.ratelimit.base import RateLimiterPort
from repo_ranker.scoring.base import RepositoryScorerPort

logger = logging.getLogger(__name__)

ALGORITHM_VERSION = "1.0"
SERVICE_NAME = "repository-ranker"

# GitHub search returns at most 1000 results; the page count is capped at 40.
_MAX_SEARCH_RESULTS = 1000
_MAX_PAGES = 40


def total_pages(total_count: int, per_page: int) -> int:
    reachable = min(total_count, _MAX_SEARCH_RESULTS)
    return min(math.ceil(reachable / per_page), _MAX_PAGES)


@dataclass
class RepositoryService:
    """Run scored repository searches under client and GitHub rate limits."""

    github: GitHubSearchPort
    scorer: RepositoryScorerPort
    cache: CachePort
    rate_limiter: RateLimiterPort
    settings: Settings = field(default_factory=Settings)

    async def search_repositories(
        self,
        request: SearchRequest,
        client_id: str | None = None,
    ) -> dict[str, Any]:
        """Return one page of scored search results, served from cache when possible.

        Raises:
            RateLimitExceededError: The client or the GitHub budget is spent.
            RepoRankerError: GitHub rejected or failed the request.
        """
        self.rate_limiter.check_client_rate_limit(client_id)

        cache_key = generate_search_key(request.q, request)
        cached = self.cache.get(cache_key)
        if cached is not None:
            logger.info("Cache hit for query: %s", request.q)
            return cached

        self.rate_limiter.check_github_api_limit()
        github_response = await self.github.search_repositories(request)
        self.rate_limiter.update_github_api_usage(github_response.rate_limit)

        items = self.scorer.score_repositories(github_response.items)
        response: dict[str, Any] = {
            "total_count": github_response.total_count,
            "incomplete_results": github_response.incomplete_results,
            "items": items,
            "page_info": {
                "current_page": request.page,
                "per_page": request.per_page,
                "total_pages": total_pages(github_response.total_count, request.per_page),
            },
            "rate_limit": github_response.rate_limit.to_dict(),
            "scoring_info": {
                "algorithm_version": ALGORITHM_VERSION,
                "factors": self.settings.scoring.as_percentages(),
            },
        }

        self.cache.set(cache_key, response, self.settings.cache.search_ttl_seconds)
        logger.info("Returning %d scored repositories for query: %s", len(items), request.q)
        return response

    async def explain_repository(
        self,
        full_name: str,
        client_id: str | None = None,
    ) -> dict[str, Any]:
        """Score a single repository and explain each component."""
        self.rate_limiter.check_client_rate_limit(client_id)
        # Malformed names are rejected before the upstream budget is charged.
        if parse_full_name(full_name) is None:
            raise InvalidSearchError(
                f"'{full_name}' is not a repository name. Use the form 'owner/repo'."
            )

        cache_key = generate_repository_key(full_name)
        cached = self.cache.get(cache_key)
        if cached is not None:
            return cached

        self.rate_limiter.check_github_api_limit()
        github_response = await self.github.get_repository(full_name)
        self.rate_limiter.update_github_api_usage(github_response.rate_limit)

        scored = self.scorer.score_repository(github_response.item)
        explanation = {
            **self.scorer.detailed_breakdown(github_response.item),
            "score_breakdown": scored["score_breakdown"],
            "popularity_score": scored["popularity_score"],
        }
        self.cache.set(cache_key, explanation, self.settings.cache.repository_ttl_seconds)
        return explanation

    def health_check(self) -> dict[str, Any]:
        return {
            "status": "ok",
            "timestamp": datetime.now(tz=UTC).isoformat(),
            "service": SERVICE_NAME,
            "version": __version__,
            "cache": asdict(self.cache.get_stats()),
            "rate_limits": self.rate_limiter.get_stats(),
        }
