"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Iterator
from datetime import UTC, datetime

import pytest

from repo_ranker.github.auth import reset_token_cache

# 2026-03-01T12:00:00Z -- a whole number of seconds so date arithmetic is exact.
NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC).timestamp()


class FakeClock:
    """Controllable replacement for ``time.time``."""

    def __init__(self, now: float = NOW) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture(autouse=True)
def _github_token(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Pin the GitHub token so no test shells out to `gh auth token`."""
    monkeypatch.setenv("GITHUB_TOKEN", "test-token")
    reset_token_cache()
    yield
    reset_token_cache()
