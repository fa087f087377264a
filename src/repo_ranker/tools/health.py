"""health_check tool -- cache and rate-limit status."""

from __future__ import annotations

from mcp.server.fastmcp import Context

from repo_ranker.tools._helpers import client_identifier, get_context


async def health_check(ctx: Context) -> dict[str, object]:
    """Report service status, cache statistics, and remaining request budgets.

    Returns:
        Dict with: status, timestamp, service, version, cache (total, valid,
        expired), rate_limits (active_clients, github_api, limits), and
        client (this caller's own budget).
    """
    try:
        app = get_context(ctx)
        report = app.service.health_check()
        report["client"] = app.rate_limiter.get_client_limit_info(
            client_identifier(ctx)
        ).to_dict()
        return report
    except Exception as exc:
        await ctx.error(f"Unexpected error in health_check: {exc}")
        return {"success": False, "error": f"Internal error: {type(exc).__name__}"}
