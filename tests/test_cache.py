"""Tests for the TTL cache (cache/store.py) and cache keys (cache/keys.py)."""

from __future__ import annotations

import pytest

from repo_ranker.cache.keys import generate_repository_key, generate_search_key
from repo_ranker.cache.store import TTLCache
from repo_ranker.models import CacheStats, SearchRequest
from tests.conftest import FakeClock


@pytest.fixture
def cache(clock: FakeClock) -> TTLCache:
    return TTLCache(300, clock=clock)


# ─── get / set / expiry ──────────────────────────────────────


class TestTTLCacheExpiry:
    def test_get_before_expiry(self, cache: TTLCache) -> None:
        cache.set("k", {"v": 1}, ttl_seconds=1)
        assert cache.get("k") == {"v": 1}

    def test_get_after_expiry(self, cache: TTLCache, clock: FakeClock) -> None:
        cache.set("k", "value", ttl_seconds=1)
        clock.advance(1.5)
        assert cache.get("k") is None
        assert cache.has("k") is False

    def test_expired_entry_deleted_on_read(self, cache: TTLCache, clock: FakeClock) -> None:
        cache.set("k", "value", ttl_seconds=1)
        clock.advance(2)
        assert len(cache) == 1
        cache.get("k")
        assert len(cache) == 0

    def test_entry_dead_at_exact_expiry(self, cache: TTLCache, clock: FakeClock) -> None:
        cache.set("k", "value", ttl_seconds=10)
        clock.advance(9)
        assert cache.has("k") is True
        clock.advance(1)
        assert cache.has("k") is False

    def test_default_ttl(self, cache: TTLCache, clock: FakeClock) -> None:
        cache.set("k", "value")
        clock.advance(299)
        assert cache.get("k") == "value"
        clock.advance(1)
        assert cache.get("k") is None

    @pytest.mark.parametrize("ttl", [0, -5, None])
    def test_non_positive_ttl_uses_default(
        self, cache: TTLCache, clock: FakeClock, ttl: float | None
    ) -> None:
        cache.set("k", "value", ttl_seconds=ttl)
        clock.advance(100)
        assert cache.get("k") == "value"

    def test_overwrite_replaces_value_and_expiry(self, cache: TTLCache, clock: FakeClock) -> None:
        cache.set("k", "old", ttl_seconds=5)
        clock.advance(4)
        cache.set("k", "new", ttl_seconds=5)
        clock.advance(4)
        assert cache.get("k") == "new"

    def test_get_default_on_miss(self, cache: TTLCache) -> None:
        assert cache.get("missing", default="fallback") == "fallback"


# ─── delete / clear / cleanup / stats ────────────────────────


class TestTTLCacheMaintenance:
    def test_delete_reports_removal(self, cache: TTLCache) -> None:
        cache.set("k", 1)
        assert cache.delete("k") is True
        assert cache.delete("k") is False

    def test_clear(self, cache: TTLCache) -> None:
        cache.set("a", 1)
        cache.set("b", 2)
        cache.clear()
        assert len(cache) == 0

    def test_cleanup_removes_only_expired(self, cache: TTLCache, clock: FakeClock) -> None:
        cache.set("short", 1, ttl_seconds=1)
        cache.set("short2", 2, ttl_seconds=2)
        cache.set("long", 3, ttl_seconds=100)
        clock.advance(5)

        assert cache.cleanup() == 2
        assert cache.get("long") == 3
        assert cache.cleanup() == 0

    def test_stats_scan_at_call_time(self, cache: TTLCache, clock: FakeClock) -> None:
        cache.set("short", 1, ttl_seconds=1)
        cache.set("long", 2, ttl_seconds=100)
        assert cache.get_stats() == CacheStats(total=2, valid=2, expired=0)

        clock.advance(10)
        assert cache.get_stats() == CacheStats(total=2, valid=1, expired=1)


# ─── Malformed keys ──────────────────────────────────────────


class TestTTLCacheMalformedKeys:
    @pytest.mark.parametrize("key", [None, "", "   ", 42, ("tuple",)])
    def test_operations_never_raise(self, cache: TTLCache, key: object) -> None:
        cache.set(key, "value")  # type: ignore[arg-type]
        assert cache.get(key) is None  # type: ignore[arg-type]
        assert cache.has(key) is False  # type: ignore[arg-type]
        assert cache.delete(key) is False  # type: ignore[arg-type]
        assert len(cache) == 0


# ─── Keys ────────────────────────────────────────────────────

_OPTIONS = {
    "language": "python",
    "created": ">2024-01-01",
    "sort": "stars",
    "order": "desc",
    "per_page": 25,
    "page": 1,
}


class TestSearchKey:
    def test_format(self) -> None:
        key = generate_search_key("web framework", _OPTIONS)
        assert key == "search:web framework:python:>2024-01-01:stars:desc:25:1"

    def test_deterministic(self) -> None:
        assert generate_search_key("q", _OPTIONS) == generate_search_key("q", dict(_OPTIONS))

    @pytest.mark.parametrize(
        ("field", "value"),
        [
            ("language", "rust"),
            ("created", ">2025-01-01"),
            ("sort", "forks"),
            ("order", "asc"),
            ("per_page", 50),
            ("page", 2),
        ],
    )
    def test_any_differing_field_changes_key(self, field: str, value: object) -> None:
        changed = {**_OPTIONS, field: value}
        assert generate_search_key("q", changed) != generate_search_key("q", _OPTIONS)

    def test_query_changes_key(self) -> None:
        assert generate_search_key("a", _OPTIONS) != generate_search_key("b", _OPTIONS)

    def test_absent_options(self) -> None:
        assert generate_search_key("q", None) == "search:q::::::"
        assert generate_search_key(None, {"sort": None}) == "search:::::::"

    def test_colons_inside_values_do_not_collide(self) -> None:
        first = generate_search_key("a:b", {"language": "c"})
        second = generate_search_key("a", {"language": "b:c"})
        assert first != second
        assert first == "search:a\\:b:c:::::"

    def test_search_request_matches_mapping(self) -> None:
        request = SearchRequest.build(
            "web framework", language="python", created=">2024-01-01"
        )
        assert generate_search_key(request.q, request) == generate_search_key(
            "web framework", _OPTIONS
        )


class TestRepositoryKey:
    def test_normalized(self) -> None:
        assert generate_repository_key(" Owner/Repo ") == "repo:owner/repo"

    def test_none(self) -> None:
        assert generate_repository_key(None) == "repo:"
