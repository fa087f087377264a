"""Helpers shared by the MCP tool functions."""

from __future__ import annotations

from typing import TYPE_CHECKING

from mcp.server.fastmcp import Context

from repo_ranker.errors import RateLimitExceededError, RepoRankerError

if TYPE_CHECKING:
    from repo_ranker.server import AppContext

UNKNOWN_CLIENT = "unknown"


def get_context(ctx: Context) -> AppContext:
    """Extract AppContext from FastMCP's lifespan context.

    Raises TypeError if the lifespan context is not an AppContext instance.
    This catches misconfiguration early with a clear error message.
    """
    from repo_ranker.server import AppContext

    app = ctx.request_context.lifespan_context
    if not isinstance(app, AppContext):
        msg = (
            f"Expected AppContext in lifespan_context, got {type(app).__name__}. "
            "Is the server configured with app_lifespan?"
        )
        raise TypeError(msg)
    return app


def client_identifier(ctx: Context) -> str:
    """Identify the caller for rate limiting; ``"unknown"`` when the session has no id."""
    client_id = getattr(ctx, "client_id", None)
    if isinstance(client_id, str) and client_id.strip():
        return client_id
    return UNKNOWN_CLIENT


def error_result(exc: RepoRankerError) -> dict[str, object]:
    """Render a domain error as a tool result."""
    result: dict[str, object] = {"success": False, "error": str(exc)}
    if exc.retryable:
        result["retryable"] = True
    if isinstance(exc, RateLimitExceededError):
        result["reset_time"] = exc.reset_time.isoformat()
        result["scope"] = exc.scope
    return result
