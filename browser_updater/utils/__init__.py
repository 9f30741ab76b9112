"""Utilities for browser_updater."""

from browser_updater.utils.console import ColorfulFormatter, configure_logging
from browser_updater.utils.shell import encode_powershell, quote_ps
from browser_updater.utils.targets import load_targets, parse_host_lines, validate_host

__all__ = [
    "ColorfulFormatter",
    "configure_logging",
    "encode_powershell",
    "load_targets",
    "parse_host_lines",
    "quote_ps",
    "validate_host",
]
