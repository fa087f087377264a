"""Port: GitHub repository API."""

from __future__ import annotations

from typing import Protocol

from repo_ranker.models import GitHubRepositoryResponse, GitHubSearchResponse, SearchRequest


class GitHubSearchPort(Protocol):
    """Port for the GitHub calls the search service makes."""

    async def search_repositories(self, request: SearchRequest) -> GitHubSearchResponse:
        """Run one repository search and return items plus rate-limit metadata."""
        ...

    async def get_repository(self, full_name: str) -> GitHubRepositoryResponse:
        """Fetch a single repository by ``owner/repo``."""
        ...
