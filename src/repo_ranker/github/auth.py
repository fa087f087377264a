"""GitHub authentication headers and rate-limit header handling."""

from __future__ import annotations

import logging
import os
import subprocess

from repo_ranker import __version__
from repo_ranker.models import GitHubRateLimit

logger = logging.getLogger(__name__)

_token_resolved: bool = False
_resolved_token: str | None = None
_resolved_token_source: str = "none"  # env | gh_cli | none


def reset_token_cache() -> None:
    """Forget the resolved token (primarily for tests)."""
    global _resolved_token
    global _resolved_token_source
    global _token_resolved

    _token_resolved = False
    _resolved_token = None
    _resolved_token_source = "none"


def resolve_github_token() -> tuple[str | None, str]:
    """Resolve auth token: env first, then `gh auth token` fallback."""
    global _resolved_token
    global _resolved_token_source
    global _token_resolved

    env_token = os.environ.get("GITHUB_TOKEN", "").strip()
    if env_token:
        _token_resolved = True
        _resolved_token = env_token
        _resolved_token_source = "env"
        return env_token, "env"

    if _token_resolved:
        return _resolved_token, _resolved_token_source

    _token_resolved = True
    gh_token = _resolve_gh_cli_token()
    if gh_token:
        _resolved_token = gh_token
        _resolved_token_source = "gh_cli"
        logger.info("Using GitHub token from `gh auth token` fallback.")
        return gh_token, "gh_cli"

    _resolved_token = None
    _resolved_token_source = "none"
    logger.warning(
        "No GitHub token configured (checked GITHUB_TOKEN and `gh auth token`). "
        "Using unauthenticated requests with a much lower rate limit."
    )
    return None, "none"


def _resolve_gh_cli_token() -> str | None:
    """Try to read a token from local GitHub CLI auth context."""
    try:
        completed = subprocess.run(
            ["gh", "auth", "token"],
            capture_output=True,
            text=True,
            timeout=2,
            check=False,
        )
    except (OSError, subprocess.SubprocessError):
        return None

    if completed.returncode != 0:
        return None
    token = completed.stdout.strip()
    return token or None


def github_headers(token: str | None) -> dict[str, str]:
    headers = {
        "Accept": "application/vnd.github+json",
        "User-Agent": f"repo-ranker/{__version__}",
    }
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers


def check_rate_limit(rate_limit: GitHubRateLimit, buffer: int) -> None:
    """Warn once GitHub's remaining budget drops to ``buffer`` or below.

    A response without rate-limit headers (``limit == 0``) is ignored.
    """
    if rate_limit.limit == 0 or rate_limit.remaining > buffer:
        return
    if rate_limit.remaining == 0:
        logger.warning(
            "GitHub API rate limit exhausted. Resets at %s",
            rate_limit.reset_datetime.isoformat(),
        )
        return
    logger.warning(
        "GitHub rate limit approaching. Remaining: %d, Reset: %s",
        rate_limit.remaining,
        rate_limit.reset_datetime.isoformat(),
    )
