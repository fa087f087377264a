"""search_repositories tool -- scored GitHub repository search."""

from __future__ import annotations

import logging

from mcp.server.fastmcp import Context

from repo_ranker.errors import RepoRankerError
from repo_ranker.models import SearchRequest
from repo_ranker.tools._helpers import client_identifier, error_result, get_context

logger = logging.getLogger(__name__)


async def search_repositories(
    q: str,
    ctx: Context,
    language: str = "",
    created: str = "",
    sort: str = "stars",
    order: str = "desc",
    per_page: int = 25,
    page: int = 1,
) -> dict[str, object]:
    """Search GitHub repositories and score each result.

    Every returned item is the GitHub repository object plus
    ``popularity_score`` and ``score_breakdown`` (popularity, activity,
    total). Items keep GitHub's order.

    Args:
        q: Search keywords; GitHub qualifiers such as "topic:cli" are allowed.
        language: Restrict to a language (e.g. "python").
        created: Creation date filter. Either "today", "week", "month", "year",
            or GitHub syntax such as ">2024-01-01".
        sort: "stars", "forks", "help-wanted-issues", or "updated".
        order: "desc" or "asc".
        per_page: Results per page (1-100).
        page: Page number, starting at 1.

    Returns:
        Dict with: total_count, incomplete_results, items, page_info,
        rate_limit, and scoring_info. On failure, success=False with an
        error message; rate-limit failures add retryable=True and reset_time.
    """
    try:
        app = get_context(ctx)
        request = SearchRequest.build(
            q,
            language=language,
            created=created,
            sort=sort,
            order=order,
            per_page=per_page,
            page=page,
        )
        return await app.service.search_repositories(request, client_id=client_identifier(ctx))
    except RepoRankerError as exc:
        logger.info("Search for %r failed: %s", q, exc)
        return error_result(exc)
    except Exception as exc:
        logger.exception("Unexpected error in search_repositories")
        await ctx.error(f"Unexpected error in search_repositories: {exc}")
        return {"success": False, "error": f"Internal error: {type(exc).__name__}"}
