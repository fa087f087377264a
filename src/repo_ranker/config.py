"""Process-wide settings, loaded once from the environment.

Every component receives the slice of ``Settings`` it needs through its
constructor; nothing reads these values from module-level literals.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

DEFAULT_GITHUB_API_URL = "https://api.github.com"


@dataclass(frozen=True, slots=True)
class ScoringWeights:
    """Weights of the popularity/activity formula."""

    stars: float = 0.40
    forks: float = 0.25
    recency: float = 0.20
    activity: float = 0.15
    # Sub-weights inside the activity term.
    watchers: float = 0.60
    open_issues: float = 0.40

    def as_percentages(self) -> dict[str, str]:
        return {
            "stars": f"{self.stars:.0%}",
            "forks": f"{self.forks:.0%}",
            "recency": f"{self.recency:.0%}",
            "activity": f"{self.activity:.0%}",
        }


@dataclass(frozen=True, slots=True)
class RateLimitSettings:
    client_per_minute: int = 60
    github_per_hour: int = 5000
    search_per_minute: int = 30
    client_window_seconds: int = 60
    github_window_seconds: int = 3600
    client_entry_max_age_seconds: int = 3600


@dataclass(frozen=True, slots=True)
class CacheSettings:
    search_ttl_seconds: int = 300
    repository_ttl_seconds: int = 3600
    cleanup_interval_seconds: int = 60


@dataclass(frozen=True, slots=True)
class GitHubSettings:
    api_url: str = DEFAULT_GITHUB_API_URL
    timeout_seconds: float = 5.0
    max_retries: int = 3
    rate_limit_buffer: int = 10


@dataclass(frozen=True, slots=True)
class Settings:
    """Immutable configuration tree for one server process."""

    scoring: ScoringWeights = field(default_factory=ScoringWeights)
    rate_limits: RateLimitSettings = field(default_factory=RateLimitSettings)
    cache: CacheSettings = field(default_factory=CacheSettings)
    github: GitHubSettings = field(default_factory=GitHubSettings)
    log_level: str = "WARNING"


def _env_int(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: not an integer, using %d", name, raw, default)
        return default
    if value < 0:
        logger.warning("Ignoring %s=%d: must not be negative, using %d", name, value, default)
        return default
    return value


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Build ``Settings`` from environment variables, falling back to defaults."""
    env = os.environ if environ is None else environ

    github = GitHubSettings(
        api_url=(env.get("GITHUB_API_URL", "").strip() or DEFAULT_GITHUB_API_URL).rstrip("/"),
        timeout_seconds=_env_int(env, "GITHUB_TIMEOUT", 5000) / 1000,
        max_retries=_env_int(env, "GITHUB_MAX_RETRIES", 3),
        rate_limit_buffer=_env_int(env, "GITHUB_RATE_LIMIT_BUFFER", 10),
    )
    rate_limits = RateLimitSettings(
        client_per_minute=_env_int(env, "RATE_LIMIT_CLIENT_PER_MINUTE", 60),
        github_per_hour=_env_int(env, "RATE_LIMIT_GITHUB_PER_HOUR", 5000),
        search_per_minute=_env_int(env, "RATE_LIMIT_SEARCH_PER_MINUTE", 30),
    )
    cache = CacheSettings(
        search_ttl_seconds=_env_int(env, "CACHE_SEARCH_TTL", 300),
        repository_ttl_seconds=_env_int(env, "CACHE_REPOSITORY_TTL", 3600),
        cleanup_interval_seconds=_env_int(env, "CACHE_CLEANUP_INTERVAL", 60),
    )
    return Settings(
        rate_limits=rate_limits,
        cache=cache,
        github=github,
        log_level=env.get("REPO_RANKER_LOG_LEVEL", "WARNING").strip().upper() or "WARNING",
    )
