"""Tests for the search orchestrator (service.py)."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from repo_ranker.cache.store import TTLCache
from repo_ranker.config import RateLimitSettings, Settings
from repo_ranker.errors import GitHubApiError, InvalidSearchError, RateLimitExceededError
from repo_ranker.models import (
    GitHubRateLimit,
    GitHubRepositoryResponse,
    GitHubSearchResponse,
    SearchRequest,
)
from repo_ranker.ratelimit.limiter import RateLimiter
from repo_ranker.scoring.scorer import RepositoryScorer
from repo_ranker.service import RepositoryService, total_pages
from tests.conftest import NOW, FakeClock

_ITEMS = [
    {"id": 1, "full_name": "a/one", "stargazers_count": 10, "updated_at": "2026-03-01T12:00:00Z"},
    {"id": 2, "full_name": "b/two", "stargazers_count": 900, "updated_at": "2026-02-01T12:00:00Z"},
]


def _search_response(total: int = 2, used: int = 1) -> GitHubSearchResponse:
    return GitHubSearchResponse(
        total_count=total,
        incomplete_results=False,
        items=[dict(item) for item in _ITEMS],
        rate_limit=GitHubRateLimit(
            limit=5000, remaining=5000 - used, reset=int(NOW) + 3600, used=used
        ),
    )


@pytest.fixture
def github() -> MagicMock:
    port = MagicMock()
    port.search_repositories = AsyncMock(return_value=_search_response())
    port.get_repository = AsyncMock(
        return_value=GitHubRepositoryResponse(
            item={"id": 9, "full_name": "x/y", "html_url": "https://github.com/x/y"},
            rate_limit=GitHubRateLimit(limit=5000, remaining=4000, reset=int(NOW) + 60, used=1000),
        )
    )
    return port


@pytest.fixture
def service(github: MagicMock, clock: FakeClock) -> RepositoryService:
    settings = Settings(rate_limits=RateLimitSettings(client_per_minute=3, github_per_hour=100))
    return RepositoryService(
        github=github,
        scorer=RepositoryScorer(settings.scoring, clock=clock),
        cache=TTLCache(settings.cache.search_ttl_seconds, clock=clock),
        rate_limiter=RateLimiter(settings.rate_limits, clock=clock),
        settings=settings,
    )


# ─── search_repositories ─────────────────────────────────────


class TestSearchRepositories:
    async def test_scores_and_shapes_response(self, service: RepositoryService) -> None:
        result = await service.search_repositories(SearchRequest.build("http"), "client")

        assert result["total_count"] == 2
        assert [item["full_name"] for item in result["items"]] == ["a/one", "b/two"]
        assert all("popularity_score" in item for item in result["items"])
        assert result["page_info"] == {"current_page": 1, "per_page": 25, "total_pages": 1}
        assert result["rate_limit"]["used"] == 1
        assert result["scoring_info"] == {
            "algorithm_version": "1.0",
            "factors": {"stars": "40%", "forks": "25%", "recency": "20%", "activity": "15%"},
        }

    async def test_second_identical_search_is_cached(
        self, service: RepositoryService, github: MagicMock
    ) -> None:
        request = SearchRequest.build("http")
        first = await service.search_repositories(request, "client")
        second = await service.search_repositories(request, "client")

        assert first == second
        assert github.search_repositories.await_count == 1

    async def test_different_page_misses_cache(
        self, service: RepositoryService, github: MagicMock
    ) -> None:
        await service.search_repositories(SearchRequest.build("http", page=1), "client")
        await service.search_repositories(SearchRequest.build("http", page=2), "client")
        assert github.search_repositories.await_count == 2

    async def test_cache_expires_after_search_ttl(
        self, service: RepositoryService, github: MagicMock, clock: FakeClock
    ) -> None:
        request = SearchRequest.build("http")
        await service.search_repositories(request, "client")
        clock.advance(300)
        await service.search_repositories(request, "client")
        assert github.search_repositories.await_count == 2

    async def test_upstream_usage_copied_into_limiter(
        self, service: RepositoryService, github: MagicMock
    ) -> None:
        github.search_repositories.return_value = _search_response(used=42)
        await service.search_repositories(SearchRequest.build("http"), "client")

        info = service.rate_limiter.get_github_limit_info()
        assert info.requests_made == 42

    async def test_client_limit_applies_to_cache_hits(self, service: RepositoryService) -> None:
        request = SearchRequest.build("http")
        for _ in range(3):
            await service.search_repositories(request, "client")

        with pytest.raises(RateLimitExceededError) as exc_info:
            await service.search_repositories(request, "client")
        assert exc_info.value.scope == "client"

    async def test_github_budget_checked_before_fetch(
        self, service: RepositoryService, github: MagicMock
    ) -> None:
        service.rate_limiter.update_github_api_usage(
            GitHubRateLimit(limit=100, remaining=0, reset=int(NOW) + 600, used=100)
        )

        with pytest.raises(RateLimitExceededError) as exc_info:
            await service.search_repositories(SearchRequest.build("http"), "client")
        assert exc_info.value.scope == "github"
        github.search_repositories.assert_not_awaited()

    async def test_github_errors_propagate_and_are_not_cached(
        self, service: RepositoryService, github: MagicMock
    ) -> None:
        github.search_repositories.side_effect = GitHubApiError("boom", status_code=502)

        with pytest.raises(GitHubApiError):
            await service.search_repositories(SearchRequest.build("http"), "client")
        assert service.cache.get_stats().total == 0

    async def test_anonymous_client_tolerated(self, service: RepositoryService) -> None:
        result = await service.search_repositories(SearchRequest.build("http"))
        assert result["total_count"] == 2


class TestTotalPages:
    @pytest.mark.parametrize(
        ("total", "per_page", "expected"),
        [
            (0, 25, 0),
            (30, 25, 2),
            (1000, 25, 40),
            (250_000, 25, 40),
            (250_000, 100, 10),
            (7, 3, 3),
        ],
    )
    def test_total_pages(self, total: int, per_page: int, expected: int) -> None:
        assert total_pages(total, per_page) == expected


# ─── explain_repository ──────────────────────────────────────


class TestExplainRepository:
    async def test_explains_and_caches(self, service: RepositoryService, github: MagicMock) -> None:
        first = await service.explain_repository("x/y", "client")
        second = await service.explain_repository("X/Y", "client")

        assert first is second
        assert first["repository"]["full_name"] == "x/y"
        assert first["weights"]["stars"] == "40%"
        assert first["popularity_score"] == first["score_breakdown"]["total"]
        assert github.get_repository.await_count == 1
        assert service.rate_limiter.get_github_limit_info().requests_made == 1000

    async def test_malformed_name_spends_no_github_budget(
        self, service: RepositoryService, github: MagicMock
    ) -> None:
        for _ in range(3):
            with pytest.raises(InvalidSearchError, match="owner/repo"):
                await service.explain_repository("not a repo", "client")

        github.get_repository.assert_not_awaited()
        assert service.rate_limiter.get_github_limit_info().requests_made == 0
        assert service.cache.get_stats().total == 0


# ─── health_check ────────────────────────────────────────────


class TestHealthCheck:
    async def test_reports_cache_and_limits(self, service: RepositoryService) -> None:
        await service.search_repositories(SearchRequest.build("http"), "client")
        report = service.health_check()

        assert report["status"] == "ok"
        assert report["service"] == "repository-ranker"
        assert report["cache"] == {"total": 1, "valid": 1, "expired": 0}
        assert report["rate_limits"]["active_clients"] == 1
        assert report["rate_limits"]["limits"]["client_per_minute"] == 3
