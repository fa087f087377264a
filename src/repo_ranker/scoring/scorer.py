"""Combine popularity and activity into a ranking score."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable, Mapping
from dataclasses import asdict
from typing import Any

from repo_ranker.config import ScoringWeights
from repo_ranker.models import ScoreBreakdown
from repo_ranker.scoring.activity import activity_breakdown, activity_score
from repo_ranker.scoring.popularity import popularity_breakdown, popularity_score

logger = logging.getLogger(__name__)


class RepositoryScorer:
    """Attach ``popularity_score`` and ``score_breakdown`` to GitHub repositories.

    The total is the plain sum of popularity and activity -- no normalization,
    so well-known repositories score far above 1.0.
    """

    def __init__(
        self,
        weights: ScoringWeights | None = None,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.weights = weights or ScoringWeights()
        self._clock = clock

    def breakdown(self, repository: Mapping[str, Any]) -> ScoreBreakdown:
        now = self._clock()
        popularity = popularity_score(repository, self.weights, now)
        activity = activity_score(repository, self.weights)
        return ScoreBreakdown(
            popularity=popularity,
            activity=activity,
            total=popularity + activity,
        )

    def score_repository(self, repository: Mapping[str, Any]) -> dict[str, Any]:
        scores = self.breakdown(repository)
        logger.debug(
            "Score for %s: popularity=%.3f activity=%.3f total=%.3f",
            repository.get("full_name"),
            scores.popularity,
            scores.activity,
            scores.total,
        )
        return {
            **repository,
            "popularity_score": scores.total,
            "score_breakdown": scores.to_dict(),
        }

    def score_repositories(
        self,
        repositories: Iterable[Mapping[str, Any]] | None,
    ) -> list[dict[str, Any]]:
        """Score every repository, keeping GitHub's original order."""
        if not repositories:
            return []

        scored: list[dict[str, Any]] = []
        for repository in repositories:
            if not isinstance(repository, Mapping):
                logger.warning("Skipping non-object search item: %r", type(repository).__name__)
                continue
            scored.append(self.score_repository(repository))

        logger.info("Scored %d repositories", len(scored))
        return scored

    def detailed_breakdown(self, repository: Mapping[str, Any]) -> dict[str, Any]:
        now = self._clock()
        popularity = popularity_breakdown(repository, self.weights, now)
        activity = activity_breakdown(repository, self.weights)
        activity_total = (activity.watchers + activity.open_issues) * self.weights.activity
        return {
            "repository": {
                "id": repository.get("id"),
                "full_name": repository.get("full_name"),
                "url": repository.get("html_url"),
            },
            "popularity": {**asdict(popularity), "total": popularity.total},
            "activity": {**asdict(activity), "total": activity_total},
            "weights": self.weights.as_percentages(),
            "total": popularity.total + activity_total,
        }
