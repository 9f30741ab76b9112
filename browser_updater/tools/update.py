"""update_browser tool: run a fleet update from an MCP client."""

import logging
from typing import TYPE_CHECKING

from fastmcp import Context

from browser_updater.models import Product
from browser_updater.report import format_report
from browser_updater.utils.targets import validate_host

if TYPE_CHECKING:
    from browser_updater.dependencies import Dependencies

logger = logging.getLogger(__name__)


def get_dependencies(ctx: Context) -> "Dependencies":
    """Fetch the Dependencies container created by the server lifespan."""
    return ctx.request_context.lifespan_context["deps"]


async def run_update(
    deps: "Dependencies",
    targets: list[str],
    product: str = "chrome",
) -> str:
    """Validate input, run a batch and render the report.

    Raises:
        ValueError: On an empty target list, an invalid or excluded host
            name, or an unknown product
    """
    hosts = [validate_host(t) for t in targets]
    if not hosts:
        raise ValueError("At least one target host is required")
    excluded = deps.config.excluded_hosts(hosts)
    if excluded:
        raise ValueError(
            f"Excluded by allowlist/blocklist: {', '.join(excluded)}"
        )
    selected = Product.parse(product)

    logger.info("tool:update_browser %s on %d host(s)", selected.value, len(hosts))
    results = await deps.orchestrator.run_batch(hosts, selected)
    return format_report(results)


async def update_browser(
    targets: list[str],
    product: str = "chrome",
    ctx: Context | None = None,
) -> str:
    """Update a browser on a fleet of Windows hosts over SSH.

    The latest vendor installer is downloaded once, then each host is
    checked and updated only when its installed version is older.

    Args:
        targets: Host names or SSH config aliases.
        product: "chrome" or "firefox" (default: chrome).

    Examples:
        update_browser(["pc-01", "pc-02"])
        update_browser(["lab-7"], product="firefox")

    Returns:
        Table of ComputerName, Old_Version, Installer_Version,
        Current_Version and Updated per host, followed by a summary line.
    """
    if ctx is None:
        raise RuntimeError("update_browser must be called through the MCP server")
    return await run_update(get_dependencies(ctx), targets, product)
