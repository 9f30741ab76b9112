"""MCP tools for browser_updater."""

from browser_updater.tools.update import update_browser

__all__ = ["update_browser"]
