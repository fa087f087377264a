"""Port: repository scoring."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any, Protocol


class RepositoryScorerPort(Protocol):
    """Port for attaching popularity/activity scores to GitHub repositories."""

    def score_repository(self, repository: Mapping[str, Any]) -> dict[str, Any]:
        """Return a copy of ``repository`` with score fields attached."""
        ...

    def score_repositories(
        self,
        repositories: Iterable[Mapping[str, Any]] | None,
    ) -> list[dict[str, Any]]:
        """Score a batch, preserving input order."""
        ...

    def detailed_breakdown(self, repository: Mapping[str, Any]) -> dict[str, Any]:
        """Explain every component of a repository's score."""
        ...
