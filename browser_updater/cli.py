"""Command line interface.

    browser-updater TARGET [--product chrome|firefox] [--concurrency N]
    browser-updater serve

TARGET is a host name, or a file listing one host per line.
"""

import argparse
import asyncio
import contextlib
import logging
import signal
import sys

from browser_updater import __version__
from browser_updater.config import Config, Settings
from browser_updater.dependencies import Dependencies
from browser_updater.models import HostResult, Product
from browser_updater.report import format_report
from browser_updater.utils.console import configure_logging
from browser_updater.utils.targets import load_targets

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_INCOMPLETE = 1
EXIT_USAGE = 2


def _positive_int(value: str) -> int:
    try:
        parsed = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {value!r}") from None
    if parsed <= 0:
        raise argparse.ArgumentTypeError(f"must be positive, got {parsed}")
    return parsed


def build_parser() -> argparse.ArgumentParser:
    """Argument parser for the update command."""
    parser = argparse.ArgumentParser(
        prog="browser-updater",
        description=(
            "Update Chrome or Firefox on Windows hosts over SSH. "
            "Use 'browser-updater serve' to run the MCP server."
        ),
    )
    parser.add_argument(
        "target",
        metavar="TARGET",
        help="host name, or path to a file with one host name per line",
    )
    parser.add_argument(
        "--product",
        choices=[p.value for p in Product],
        default=Product.CHROME.value,
        help="browser to update (default: chrome)",
    )
    parser.add_argument(
        "--concurrency",
        type=_positive_int,
        default=None,
        help="hosts processed at once (default: BROWSER_UPDATER_MAX_CONCURRENCY or 16)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="log level (default: BROWSER_UPDATER_LOG_LEVEL or INFO)",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    return parser


async def run_update(
    deps: Dependencies, hosts: list[str], product: Product
) -> list[HostResult]:
    """Run one batch; SIGINT stops dispatching instead of aborting."""
    loop = asyncio.get_running_loop()
    installed = False
    with contextlib.suppress(NotImplementedError):
        loop.add_signal_handler(signal.SIGINT, deps.orchestrator.cancel)
        installed = True
    try:
        return await deps.orchestrator.run_batch(hosts, product)
    finally:
        if installed:
            loop.remove_signal_handler(signal.SIGINT)
        await deps.cleanup()


def run_server() -> None:
    """Run the MCP server with configured transport."""
    settings = Settings.from_env()
    configure_logging(settings.log_level, settings.log_colors)

    from browser_updater.server import mcp

    if settings.transport == "stdio":
        logger.info("Starting browser_updater server (transport=stdio)")
        mcp.run(transport="stdio")
    else:
        logger.info(
            "Starting browser_updater server (transport=http, host=%s, port=%d)",
            settings.http_host,
            settings.http_port,
        )
        mcp.run(transport="http", host=settings.http_host, port=settings.http_port)


def main(argv: list[str] | None = None) -> int:
    """CLI entry point.

    Returns:
        0 when every host is updated or already current, 1 otherwise,
        2 on usage or configuration errors
    """
    argv = sys.argv[1:] if argv is None else argv
    if argv[:1] == ["serve"]:
        run_server()
        return EXIT_OK

    args = build_parser().parse_args(argv)
    settings = Settings.from_env()
    configure_logging(args.log_level or settings.log_level, settings.log_colors)

    try:
        hosts = load_targets(args.target)
        product = Product.parse(args.product)
        config = Config.from_env()
        excluded = config.excluded_hosts(hosts)
        if excluded:
            raise ValueError(
                f"excluded by allowlist/blocklist: {', '.join(excluded)}"
            )
        deps = Dependencies.from_config(config, max_concurrency=args.concurrency)
    except (ValueError, OSError) as e:
        print(f"browser-updater: error: {e}", file=sys.stderr)
        return EXIT_USAGE

    results = asyncio.run(run_update(deps, hosts, product))
    print(format_report(results))
    return EXIT_OK if all(r.outcome.is_success for r in results) else EXIT_INCOMPLETE
