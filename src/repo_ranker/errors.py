"""Exception hierarchy for repo-ranker.

All exceptions inherit from RepoRankerError (single catch point).
Messages are written for the end user -- clear, actionable, no stack traces.
"""

from __future__ import annotations

from datetime import datetime


class RepoRankerError(Exception):
    """Base exception for all repo-ranker errors."""

    retryable: bool = False


class InvalidSearchError(RepoRankerError):
    """Search parameters failed validation (locally or upstream)."""


class RateLimitExceededError(RepoRankerError):
    """A client or upstream request budget is exhausted.

    Retryable: the caller may try again once ``reset_time`` has passed.
    """

    retryable = True

    def __init__(self, message: str, *, scope: str, reset_time: datetime) -> None:
        super().__init__(message)
        self.scope = scope  # "client" | "github"
        self.reset_time = reset_time


class GitHubApiError(RepoRankerError):
    """GitHub answered with a non-success status."""

    def __init__(self, message: str, *, status_code: int) -> None:
        super().__init__(message)
        self.status_code = status_code


class GitHubUnavailableError(RepoRankerError):
    """GitHub could not be reached (network error, timeout)."""

    retryable = True
