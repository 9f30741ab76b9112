"""MCP resources for browser_updater."""

from browser_updater.resources.hosts import list_hosts_resource

__all__ = ["list_hosts_resource"]
