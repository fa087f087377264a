"""Popularity score: stars, forks, and update recency.

    log10(stars + 1) * w_stars
  + log10(forks + 1) * w_forks
  + max(0, (365 - days_since_update) / 365) * w_recency
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any

from repo_ranker.config import ScoringWeights
from repo_ranker.dates import days_since
from repo_ranker.models import PopularityBreakdown

_DAYS_PER_YEAR = 365


def read_count(repository: Mapping[str, Any], key: str) -> float:
    """Read a numeric metric, treating missing or non-numeric values as 0."""
    value = repository.get(key)
    if value is None:
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def log_term(count: float) -> float:
    """``log10(count + 1)`` with negative counts clamped to zero."""
    return math.log10(max(count, 0.0) + 1)


def last_updated(repository: Mapping[str, Any]) -> object:
    """``updated_at``, falling back to ``pushed_at``. None means "now"."""
    return repository.get("updated_at") or repository.get("pushed_at") or None


def recency_factor(days: float) -> float:
    return max(0.0, (_DAYS_PER_YEAR - days) / _DAYS_PER_YEAR)


def popularity_breakdown(
    repository: Mapping[str, Any],
    weights: ScoringWeights,
    now: float,
) -> PopularityBreakdown:
    stars = read_count(repository, "stargazers_count")
    forks = read_count(repository, "forks_count")
    updated = last_updated(repository)
    days = 0.0 if updated is None else days_since(updated, now)

    return PopularityBreakdown(
        stars=log_term(stars) * weights.stars,
        forks=log_term(forks) * weights.forks,
        recency=recency_factor(days) * weights.recency,
        raw_values={
            "stars": stars,
            "forks": forks,
            # An unparseable date has no day count to report.
            "days_since_update": days if math.isfinite(days) else None,
        },
    )


def popularity_score(
    repository: Mapping[str, Any],
    weights: ScoringWeights,
    now: float,
) -> float:
    """Compute the popularity score. Never raises; always finite."""
    return popularity_breakdown(repository, weights, now).total
