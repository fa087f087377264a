"""MCP server that searches GitHub and ranks repositories by popularity."""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass

import httpx
from mcp.server.fastmcp import FastMCP
from mcp.types import ToolAnnotations

from repo_ranker.cache.store import TTLCache
from repo_ranker.config import Settings, load_settings
from repo_ranker.github.client import GitHubClient
from repo_ranker.maintenance import run_periodic_cleanup
from repo_ranker.ratelimit.limiter import RateLimiter
from repo_ranker.scoring.scorer import RepositoryScorer
from repo_ranker.service import RepositoryService
from repo_ranker.tools.explain import explain_score
from repo_ranker.tools.health import health_check
from repo_ranker.tools.search import search_repositories


@dataclass(frozen=True, slots=True)
class AppContext:
    """Shared state across all tool invocations.

    The cache and rate limiter hold process-wide mutable state; they are
    created once here and reached only through this context.
    """

    settings: Settings
    http_client: httpx.AsyncClient
    github: GitHubClient
    scorer: RepositoryScorer
    cache: TTLCache
    rate_limiter: RateLimiter
    service: RepositoryService


@asynccontextmanager
async def app_lifespan(server: FastMCP) -> AsyncIterator[AppContext]:
    """Manage shared adapter lifecycle: the composition root."""
    settings = load_settings()
    async with httpx.AsyncClient(
        timeout=httpx.Timeout(settings.github.timeout_seconds, connect=10.0),
        follow_redirects=True,
        limits=httpx.Limits(max_connections=10, max_keepalive_connections=5),
    ) as http_client:
        github = GitHubClient(http_client, settings.github)
        scorer = RepositoryScorer(settings.scoring)
        cache = TTLCache(settings.cache.search_ttl_seconds)
        rate_limiter = RateLimiter(settings.rate_limits)
        service = RepositoryService(
            github=github,
            scorer=scorer,
            cache=cache,
            rate_limiter=rate_limiter,
            settings=settings,
        )

        cleanup_task: asyncio.Task[None] | None = None
        if settings.cache.cleanup_interval_seconds > 0:
            cleanup_task = asyncio.create_task(
                run_periodic_cleanup(
                    cache, rate_limiter, settings.cache.cleanup_interval_seconds
                )
            )
        try:
            yield AppContext(
                settings=settings,
                http_client=http_client,
                github=github,
                scorer=scorer,
                cache=cache,
                rate_limiter=rate_limiter,
                service=service,
            )
        finally:
            if cleanup_task is not None:
                cleanup_task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await cleanup_task


mcp = FastMCP(
    "repo-ranker",
    instructions=(
        "repo-ranker searches GitHub repositories and ranks them with a transparent "
        "popularity score.\n\n"
        "## Tools\n"
        "- **search_repositories** - GitHub repository search. Every item carries "
        "`popularity_score` and `score_breakdown` (popularity, activity, total). "
        "Results keep GitHub's order; sort by `popularity_score` yourself if the user "
        "asks for the most popular.\n"
        "- **explain_score** - Break one repository's score into stars, forks, "
        "recency, watchers, and open-issue components.\n"
        "- **health_check** - Cache statistics and remaining rate-limit budgets.\n\n"
        "## Scoring\n"
        "popularity = log10(stars+1)*0.40 + log10(forks+1)*0.25 + recency*0.20; "
        "activity = (log10(watchers+1)*0.60 + issues_curve*0.40)*0.15; "
        "total = popularity + activity (unbounded).\n\n"
        "## Rate limits\n"
        "When a tool returns `retryable: true`, wait until `reset_time` before retrying. "
        "Identical searches within five minutes are served from cache and cost no "
        "GitHub quota."
    ),
    lifespan=app_lifespan,
)

# ─── Read-only tools ──────────────────────────────────────────
mcp.tool(annotations=ToolAnnotations(readOnlyHint=True))(search_repositories)
mcp.tool(annotations=ToolAnnotations(readOnlyHint=True))(explain_score)
mcp.tool(annotations=ToolAnnotations(readOnlyHint=True))(health_check)
