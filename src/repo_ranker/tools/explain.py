"""explain_score tool -- break down one repository's score."""

from __future__ import annotations

from mcp.server.fastmcp import Context

from repo_ranker.errors import RepoRankerError
from repo_ranker.tools._helpers import client_identifier, error_result, get_context


async def explain_score(
    full_name: str,
    ctx: Context,
) -> dict[str, object]:
    """Explain how a repository's popularity score is computed.

    Use this when the user asks why a repository ranks where it does.

    Args:
        full_name: Repository as "owner/repo" or a GitHub URL.

    Returns:
        Dict with: repository (id, full_name, url), popularity (stars,
        forks, recency components and raw values), activity (watchers,
        open_issues components and raw values), weights, score_breakdown,
        and popularity_score.
    """
    try:
        app = get_context(ctx)
        return await app.service.explain_repository(full_name, client_id=client_identifier(ctx))
    except RepoRankerError as exc:
        return error_result(exc)
    except Exception as exc:
        await ctx.error(f"Unexpected error in explain_score: {exc}")
        return {"success": False, "error": f"Internal error: {type(exc).__name__}"}
