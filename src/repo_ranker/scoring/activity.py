"""Activity score: watchers and open issues.

Uses the activity share of the overall weight:

    (log10(watchers + 1) * w_watchers + issues_bell_curve(issues) * w_issues) * w_activity
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from repo_ranker.config import ScoringWeights
from repo_ranker.models import ActivityBreakdown
from repo_ranker.scoring.popularity import log_term, read_count


def issues_bell_curve(open_issues: float) -> float:
    """Reward a moderate number of open issues over none or too many.

    A step function peaking at 6-20 issues. Negative counts are not special
    cased: they satisfy ``<= 5`` and score 0.5.
    """
    if open_issues == 0:
        return 0.2
    if open_issues <= 5:
        return 0.5
    if open_issues <= 20:
        return 1.0
    if open_issues <= 50:
        return 0.8
    if open_issues <= 100:
        return 0.6
    if open_issues <= 200:
        return 0.4
    return 0.2


def activity_breakdown(
    repository: Mapping[str, Any],
    weights: ScoringWeights,
) -> ActivityBreakdown:
    watchers = read_count(repository, "watchers_count")
    open_issues = read_count(repository, "open_issues_count")
    return ActivityBreakdown(
        watchers=log_term(watchers) * weights.watchers,
        open_issues=issues_bell_curve(open_issues) * weights.open_issues,
        raw_values={"watchers": watchers, "open_issues": open_issues},
    )


def activity_score(repository: Mapping[str, Any], weights: ScoringWeights) -> float:
    """Compute the activity score. Never raises; always finite."""
    breakdown = activity_breakdown(repository, weights)
    return (breakdown.watchers + breakdown.open_issues) * weights.activity
