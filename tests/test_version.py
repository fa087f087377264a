"""Tests for runtime package version resolution."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as distribution_version

import repo_ranker


class TestRuntimeVersion:
    """Version resolution should reflect installed package metadata."""

    def test_module_version_matches_installed_distribution(self):
        assert repo_ranker.__version__ == distribution_version("repo-ranker")

    def test_resolve_version_uses_deterministic_fallback_when_metadata_missing(self, monkeypatch):
        def _raise_package_not_found(_: str) -> str:
            raise PackageNotFoundError

        monkeypatch.setattr(repo_ranker, "_distribution_version", _raise_package_not_found)

        assert repo_ranker._resolve_version() == repo_ranker._LOCAL_VERSION_FALLBACK

    def test_user_agent_carries_version(self):
        from repo_ranker.github.auth import github_headers

        assert github_headers(None)["User-Agent"] == f"repo-ranker/{repo_ranker.__version__}"
