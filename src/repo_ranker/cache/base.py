"""Port: in-process response cache."""

from __future__ import annotations

from typing import Any, Protocol

from repo_ranker.models import CacheStats


class CachePort(Protocol):
    """Port for a key/value cache with per-entry expiry.

    Implementations never raise for malformed keys.
    """

    def get(self, key: str, default: Any = None) -> Any:
        """Return the live value for ``key`` or ``default``."""
        ...

    def set(self, key: str, value: Any, ttl_seconds: float | None = None) -> None:
        """Store ``value`` until ``now + ttl_seconds``."""
        ...

    def delete(self, key: str) -> bool:
        """Remove ``key``; report whether anything was removed."""
        ...

    def has(self, key: str) -> bool:
        """Whether ``key`` holds a live entry."""
        ...

    def clear(self) -> None:
        """Remove every entry."""
        ...

    def cleanup(self) -> int:
        """Remove expired entries and return how many were dropped."""
        ...

    def get_stats(self) -> CacheStats:
        """Count total/valid/expired entries at call time."""
        ...
