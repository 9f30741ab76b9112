"""browser_updater FastMCP server.

Thin wrapper wiring the update tool and hosts resource to the shared
Dependencies container built by the lifespan.
"""

import logging
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from functools import partial
from typing import Any

from fastmcp import Context, FastMCP
from starlette.requests import Request
from starlette.responses import PlainTextResponse

from browser_updater.dependencies import Dependencies
from browser_updater.resources import list_hosts_resource
from browser_updater.tools import update_browser
from browser_updater.tools.update import get_dependencies

logger = logging.getLogger(__name__)


@asynccontextmanager
async def app_lifespan(
    server: FastMCP,
    deps_factory: Callable[[], Dependencies] = Dependencies.create,
) -> AsyncIterator[dict[str, Any]]:
    """Build dependencies at startup and close pooled connections on exit.

    Yields:
        Dict with the Dependencies container and configured host names
    """
    logger.info("browser_updater server starting up")
    deps = deps_factory()

    hosts = deps.config.get_hosts()
    logger.info(
        "Loaded %d SSH host(s): %s",
        len(hosts),
        ", ".join(sorted(hosts)) if hosts else "(none)",
    )
    logger.info("browser_updater server ready to accept connections")

    try:
        yield {"deps": deps, "hosts": list(hosts)}
    finally:
        logger.info("browser_updater server shutting down")
        if deps.pool.pool_size > 0:
            logger.info(
                "Closing %d active SSH connection(s): %s",
                deps.pool.pool_size,
                ", ".join(deps.pool.active_hosts),
            )
        await deps.cleanup()
        logger.info("browser_updater server shutdown complete")


async def _list_hosts(ctx: Context) -> str:
    """List hosts known from SSH config."""
    return await list_hosts_resource(get_dependencies(ctx).config)


def create_server(
    deps_factory: Callable[[], Dependencies] = Dependencies.create,
) -> FastMCP:
    """Create and configure the MCP server.

    Args:
        deps_factory: Builds the Dependencies container at startup

    Returns:
        Configured FastMCP server instance
    """
    server = FastMCP(
        "browser_updater",
        lifespan=partial(app_lifespan, deps_factory=deps_factory),
    )

    server.tool()(update_browser)
    server.resource("hosts://list", mime_type="text/plain")(_list_hosts)

    @server.custom_route("/health", methods=["GET"])
    async def health_check(request: Request) -> PlainTextResponse:
        """Health check endpoint."""
        client_host = request.client.host if request.client else "unknown"
        logger.debug("Health check from %s", client_host)
        return PlainTextResponse("OK")

    return server


# Default server instance
mcp = create_server()
