"""Hosts resource listing update targets known from SSH config."""

from browser_updater.config import Config


async def list_hosts_resource(config: Config) -> str:
    """List SSH config hosts that can be passed to update_browser.

    Returns:
        Formatted host list, or a hint when SSH config defines none
    """
    hosts = config.get_hosts()
    default_user = config.settings.ssh_user or "(ssh default)"

    if not hosts:
        return (
            "No SSH hosts configured.\n"
            "Any reachable host name can still be targeted directly "
            f"as user {default_user}."
        )

    lines = ["Configured Hosts", "=" * 40, ""]
    for name, host in sorted(hosts.items()):
        user = host.user or default_user
        lines.append(f"{name}")
        lines.append(f"    SSH:  {user}@{host.hostname}:{host.port}")
    lines.append("")
    lines.append(f"{len(hosts)} host(s). Unlisted names connect directly.")
    return "\n".join(lines)
