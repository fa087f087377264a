"""Async client for the GitHub REST API (repository search and lookup).

API docs: https://docs.github.com/en/rest/search/search#search-repositories
"""

from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass, field

import httpx

from repo_ranker.config import GitHubSettings
from repo_ranker.dates import parse_date_range
from repo_ranker.errors import (
    GitHubApiError,
    GitHubUnavailableError,
    InvalidSearchError,
    RateLimitExceededError,
)
from repo_ranker.github.auth import check_rate_limit, github_headers, resolve_github_token
from repo_ranker.models import (
    MAX_PER_PAGE,
    GitHubRateLimit,
    GitHubRepositoryResponse,
    GitHubSearchResponse,
    SearchRequest,
)

logger = logging.getLogger(__name__)

_FULL_NAME_RE = re.compile(r"^([A-Za-z0-9_.-]+)/([A-Za-z0-9_.-]+?)(?:\.git)?$")
_GITHUB_URL_RE = re.compile(r"https?://github\.com/([^/]+)/([^/]+?)(?:\.git)?(?:/.*)?$")


def parse_full_name(value: str) -> tuple[str, str] | None:
    """Extract (owner, repo) from ``owner/repo`` or a GitHub URL."""
    value = value.strip()
    m = _GITHUB_URL_RE.match(value) or _FULL_NAME_RE.match(value)
    if m:
        return m.group(1), m.group(2)
    return None


def build_search_query(request: SearchRequest) -> str:
    """Append ``language:``/``created:`` qualifiers the query does not already carry."""
    parts = [request.q]
    lowered = request.q.lower()
    if request.language and "language:" not in lowered:
        parts.append(f"language:{request.language}")
    if request.created and "created:" not in lowered:
        parts.append(f"created:{parse_date_range(request.created)}")
    return " ".join(parts)


def _error_message(response: httpx.Response, fallback: str) -> str:
    try:
        data = response.json()
    except ValueError:
        return fallback
    if isinstance(data, dict) and data.get("message"):
        return str(data["message"])
    return fallback


def _is_rate_limit_response(response: httpx.Response) -> bool:
    return response.status_code in (403, 429) and (
        response.headers.get("x-ratelimit-remaining") == "0"
    )


@dataclass
class GitHubClient:
    """GitHub REST client with exponential-backoff retry.

    Retries network errors, 5xx responses, and 403s that are not rate-limit
    exhaustion, waiting ``2**attempt`` seconds between attempts.
    """

    http: httpx.AsyncClient
    settings: GitHubSettings = field(default_factory=GitHubSettings)

    # ── Public API ────────────────────────────────────────────

    async def search_repositories(self, request: SearchRequest) -> GitHubSearchResponse:
        """Search repositories.

        Raises:
            RateLimitExceededError: GitHub reports the budget as exhausted.
            InvalidSearchError: GitHub rejected the query (422).
            GitHubApiError: Any other non-success status.
            GitHubUnavailableError: GitHub could not be reached.
        """
        params: dict[str, object] = {
            "q": build_search_query(request),
            "sort": request.sort,
            "order": request.order,
            "per_page": min(request.per_page, MAX_PER_PAGE),
            "page": max(request.page, 1),
        }
        logger.info("Searching repositories with params: %s", params)

        response = await self._get("/search/repositories", params=params)
        data = response.json()
        rate_limit = GitHubRateLimit.from_headers(response.headers)
        check_rate_limit(rate_limit, self.settings.rate_limit_buffer)

        total = int(data.get("total_count") or 0)
        logger.info("GitHub API returned %d total repositories", total)
        return GitHubSearchResponse(
            total_count=total,
            incomplete_results=bool(data.get("incomplete_results", False)),
            items=list(data.get("items") or []),
            rate_limit=rate_limit,
        )

    async def get_repository(self, full_name: str) -> GitHubRepositoryResponse:
        """Fetch a single repository by ``owner/repo`` (or GitHub URL)."""
        parsed = parse_full_name(full_name)
        if parsed is None:
            raise InvalidSearchError(
                f"'{full_name}' is not a repository name. Use the form 'owner/repo'."
            )
        owner, repo = parsed
        response = await self._get(f"/repos/{owner}/{repo}")
        rate_limit = GitHubRateLimit.from_headers(response.headers)
        check_rate_limit(rate_limit, self.settings.rate_limit_buffer)
        return GitHubRepositoryResponse(item=response.json(), rate_limit=rate_limit)

    # ── HTTP helpers ──────────────────────────────────────────

    def _headers(self) -> dict[str, str]:
        token, _ = resolve_github_token()
        return github_headers(token)

    async def _get(
        self,
        path: str,
        *,
        params: dict[str, object] | None = None,
    ) -> httpx.Response:
        url = f"{self.settings.api_url}{path}"
        max_retries = self.settings.max_retries
        last_exc: httpx.HTTPError | None = None

        for attempt in range(max_retries + 1):
            try:
                response = await self.http.get(
                    url,
                    params=params,
                    headers=self._headers(),
                    timeout=self.settings.timeout_seconds,
                )
            except httpx.HTTPError as exc:
                last_exc = exc
                if attempt < max_retries:
                    await self._backoff(attempt, type(exc).__name__)
                    continue
                break

            if response.is_success:
                return response
            if self._should_retry(response) and attempt < max_retries:
                await self._backoff(attempt, f"HTTP {response.status_code}")
                continue
            raise self._error_for(response, path)

        logger.error("GitHub API request to %s failed: %s", path, last_exc)
        raise GitHubUnavailableError(
            f"Failed to communicate with GitHub API: {last_exc}"
        ) from last_exc

    async def _backoff(self, attempt: int, reason: str) -> None:
        delay = 2**attempt
        logger.warning(
            "GitHub request failed (%s), retrying in %ds (attempt %d/%d)",
            reason,
            delay,
            attempt + 1,
            self.settings.max_retries,
        )
        await asyncio.sleep(delay)

    @staticmethod
    def _should_retry(response: httpx.Response) -> bool:
        if _is_rate_limit_response(response):
            return False
        return response.status_code >= 500 or response.status_code == 403

    @staticmethod
    def _error_for(response: httpx.Response, path: str) -> Exception:
        status = response.status_code
        if _is_rate_limit_response(response):
            rate_limit = GitHubRateLimit.from_headers(response.headers)
            reset = rate_limit.reset_datetime
            return RateLimitExceededError(
                f"GitHub API rate limit exceeded. Reset at {reset.isoformat()}",
                scope="github",
                reset_time=reset,
            )
        message = _error_message(response, "GitHub API error")
        if status == 403:
            return GitHubApiError("GitHub API access forbidden", status_code=status)
        if status == 422:
            return InvalidSearchError(f"GitHub API validation failed: {message}")
        if status == 404:
            return GitHubApiError(f"GitHub API resource not found: {path}", status_code=status)
        return GitHubApiError(f"GitHub API error: {message}", status_code=status)
