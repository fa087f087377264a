"""Cache key construction.

Search keys have the shape::

    search:<query>:<language>:<created>:<sort>:<order>:<per_page>:<page>

Identical inputs always give identical keys; absent options render as empty
segments. A literal ``:`` (or ``\\``) inside a segment is backslash-escaped,
so ``q="a:b"`` and ``q="a", language="b"`` can never share a key.
"""

from __future__ import annotations

from collections.abc import Mapping

from repo_ranker.models import SearchRequest

_SEARCH_FIELDS = ("language", "created", "sort", "order", "per_page", "page")


def _segment(value: object) -> str:
    if value is None:
        return ""
    return str(value).replace("\\", "\\\\").replace(":", "\\:")


def generate_search_key(
    query: str | None,
    options: Mapping[str, object] | SearchRequest | None = None,
) -> str:
    if isinstance(options, SearchRequest):
        options = options.cache_options()
    elif not isinstance(options, Mapping):
        options = {}
    segments = [_segment(query)] + [_segment(options.get(name)) for name in _SEARCH_FIELDS]
    return "search:" + ":".join(segments)


def generate_repository_key(full_name: str | None) -> str:
    return f"repo:{_segment(full_name).strip().lower()}"
