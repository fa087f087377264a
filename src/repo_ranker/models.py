"""Domain models for repo-ranker.

Value objects are frozen dataclasses. The two rate-limit window types are the
exception: the limiter mutates them in place on every check.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from repo_ranker.errors import InvalidSearchError

# ─── Search request ───────────────────────────────────────────

SORT_FIELDS: frozenset[str] = frozenset({"stars", "forks", "help-wanted-issues", "updated"})
SORT_ORDERS: frozenset[str] = frozenset({"desc", "asc"})
MAX_PER_PAGE = 100
DEFAULT_PER_PAGE = 25


@dataclass(frozen=True, slots=True)
class SearchRequest:
    """A validated repository search."""

    q: str
    language: str = ""
    created: str = ""
    sort: str = "stars"
    order: str = "desc"
    per_page: int = DEFAULT_PER_PAGE
    page: int = 1

    @classmethod
    def build(
        cls,
        q: str | None,
        *,
        language: str | None = None,
        created: str | None = None,
        sort: str | None = None,
        order: str | None = None,
        per_page: int | None = None,
        page: int | None = None,
    ) -> SearchRequest:
        """Validate raw parameters and fill in defaults.

        Raises:
            InvalidSearchError: On a blank query or an out-of-range option.
        """
        query = (q or "").strip()
        if not query:
            raise InvalidSearchError('Search query parameter "q" is required')

        sort = sort or "stars"
        if sort not in SORT_FIELDS:
            raise InvalidSearchError(
                f"Invalid sort '{sort}'. Expected one of: {', '.join(sorted(SORT_FIELDS))}"
            )
        order = order or "desc"
        if order not in SORT_ORDERS:
            raise InvalidSearchError(f"Invalid order '{order}'. Expected 'desc' or 'asc'")

        per_page = DEFAULT_PER_PAGE if per_page is None else per_page
        if not 1 <= per_page <= MAX_PER_PAGE:
            raise InvalidSearchError(f"per_page must be between 1 and {MAX_PER_PAGE}")
        page = 1 if page is None else page
        if page < 1:
            raise InvalidSearchError("page must be 1 or greater")

        return cls(
            q=query,
            language=(language or "").strip(),
            created=(created or "").strip(),
            sort=sort,
            order=order,
            per_page=per_page,
            page=page,
        )

    def cache_options(self) -> dict[str, object]:
        return {
            "language": self.language,
            "created": self.created,
            "sort": self.sort,
            "order": self.order,
            "per_page": self.per_page,
            "page": self.page,
        }


# ─── Cache ────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class CacheEntry:
    """One cached value. Live while ``now < expires_at`` (epoch seconds)."""

    key: str
    value: Any
    expires_at: float


@dataclass(frozen=True, slots=True)
class CacheStats:
    total: int
    valid: int
    expired: int


# ─── Rate limiting ────────────────────────────────────────────


@dataclass(slots=True)
class RateLimitWindow:
    """Fixed-window counter for one client."""

    client_id: str
    count: int
    reset_time: float


@dataclass(slots=True)
class UpstreamBudget:
    """Process-wide estimate of the GitHub API budget."""

    count: int
    reset_time: float


@dataclass(frozen=True, slots=True)
class RateLimitInfo:
    requests_made: int
    requests_remaining: int
    reset_time: datetime

    def to_dict(self) -> dict[str, object]:
        return {
            "requests_made": self.requests_made,
            "requests_remaining": self.requests_remaining,
            "reset_time": self.reset_time.isoformat(),
        }


def _header_int(headers: Mapping[str, str], name: str) -> int:
    try:
        return int(headers.get(name) or 0)
    except (TypeError, ValueError):
        return 0


@dataclass(frozen=True, slots=True)
class GitHubRateLimit:
    """Rate-limit metadata reported by GitHub in response headers."""

    limit: int = 0
    remaining: int = 0
    reset: int = 0  # unix seconds
    used: int = 0
    resource: str = ""

    @classmethod
    def from_headers(cls, headers: Mapping[str, str]) -> GitHubRateLimit:
        """Parse ``x-ratelimit-*`` headers. Missing or malformed fields become 0."""
        return cls(
            limit=_header_int(headers, "x-ratelimit-limit"),
            remaining=_header_int(headers, "x-ratelimit-remaining"),
            reset=_header_int(headers, "x-ratelimit-reset"),
            used=_header_int(headers, "x-ratelimit-used"),
            resource=str(headers.get("x-ratelimit-resource") or ""),
        )

    @property
    def reset_datetime(self) -> datetime:
        return datetime.fromtimestamp(self.reset, tz=UTC)

    def to_dict(self) -> dict[str, object]:
        return {
            "limit": self.limit,
            "remaining": self.remaining,
            "reset": self.reset_datetime.isoformat(),
            "used": self.used,
            "resource": self.resource,
        }


# ─── GitHub responses ─────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class GitHubSearchResponse:
    total_count: int
    incomplete_results: bool
    items: list[dict[str, Any]] = field(default_factory=list)
    rate_limit: GitHubRateLimit = field(default_factory=GitHubRateLimit)


@dataclass(frozen=True, slots=True)
class GitHubRepositoryResponse:
    item: dict[str, Any]
    rate_limit: GitHubRateLimit = field(default_factory=GitHubRateLimit)


# ─── Scoring ──────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class ScoreBreakdown:
    popularity: float
    activity: float
    total: float

    def to_dict(self) -> dict[str, float]:
        return {"popularity": self.popularity, "activity": self.activity, "total": self.total}


@dataclass(frozen=True, slots=True)
class PopularityBreakdown:
    """Weighted popularity components plus the raw inputs they came from."""

    stars: float
    forks: float
    recency: float
    raw_values: dict[str, float] = field(default_factory=dict)

    @property
    def total(self) -> float:
        return self.stars + self.forks + self.recency


@dataclass(frozen=True, slots=True)
class ActivityBreakdown:
    """Sub-weighted activity components (before the overall activity weight)."""

    watchers: float
    open_issues: float
    raw_values: dict[str, float] = field(default_factory=dict)
