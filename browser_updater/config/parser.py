"""SSH config file parser.

Reads ~/.ssh/config so fleet hosts can carry their own HostName, User, Port
and IdentityFile. Host names not present in the file are still valid
targets; see Config.resolve_host.
"""

import logging
import os
import re
from pathlib import Path

from browser_updater.models import SSHHost

logger = logging.getLogger(__name__)


class SSHConfigParser:
    """Parser for SSH config files with allowlist/blocklist filtering."""

    def __init__(
        self,
        config_path: Path | str | None = None,
        allowlist: list[str] | None = None,
        blocklist: list[str] | None = None,
    ):
        """Initialize SSH config parser.

        Args:
            config_path: Path to SSH config file (default: ~/.ssh/config)
            allowlist: Only include these hosts (if set)
            blocklist: Exclude these hosts
        """
        if config_path is None:
            config_path = Path.home() / ".ssh" / "config"

        self.config_path = Path(config_path)
        self.allowlist = set(allowlist) if allowlist else None
        self.blocklist = set(blocklist) if blocklist else set()

    def parse(self) -> dict[str, SSHHost]:
        """Parse SSH config and return host definitions.

        Returns:
            Dictionary mapping host alias to SSHHost objects
        """
        if not self.config_path.exists():
            logger.debug("SSH config not found: %s", self.config_path)
            return {}

        try:
            content = self.config_path.read_text()
        except OSError as e:
            logger.warning("Cannot read SSH config %s: %s", self.config_path, e)
            return {}

        hosts: dict[str, SSHHost] = {}
        current_host: str | None = None
        current_data: dict[str, str] = {}
        global_defaults: dict[str, str] = {}

        for line in content.splitlines():
            line = line.strip()
            if not line or line.startswith("#"):
                continue

            host_match = re.match(r"^Host\s+(\S+)", line, re.IGNORECASE)
            if host_match:
                self._add_host(hosts, current_host, current_data)
                current_host = host_match.group(1)
                if "*" in current_host or "?" in current_host:
                    current_host = "*"
                current_data = global_defaults.copy() if current_host != "*" else {}
                continue

            kv_match = re.match(r"^(\w+)\s+(.+)$", line)
            if kv_match and current_host:
                key = kv_match.group(1).lower()
                value = kv_match.group(2).strip()
                if key == "identityfile":
                    value = os.path.expanduser(value)
                current_data[key] = value
                if current_host == "*":
                    global_defaults[key] = value

        self._add_host(hosts, current_host, current_data)

        logger.info("Parsed %d hosts from %s", len(hosts), self.config_path)
        return hosts

    def _add_host(
        self,
        hosts: dict[str, SSHHost],
        name: str | None,
        data: dict[str, str],
    ) -> None:
        """Store a completed Host block if it is concrete and allowed."""
        if not name or name == "*" or not data.get("hostname"):
            return
        if not self.is_host_allowed(name):
            return
        try:
            port = int(data.get("port", "22"))
        except ValueError:
            port = 22
        hosts[name] = SSHHost(
            name=name,
            hostname=data["hostname"],
            user=data.get("user"),
            port=port,
            identity_file=data.get("identityfile"),
        )

    def is_host_allowed(self, name: str) -> bool:
        """Check if host passes allowlist/blocklist filters."""
        if self.allowlist:
            return name in self.allowlist
        if self.blocklist:
            return name not in self.blocklist
        return True
