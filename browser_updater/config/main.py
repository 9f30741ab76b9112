"""Application configuration.

Delegates to specialized components:
- SSHConfigParser: Reads ~/.ssh/config
- HostKeyVerifier: Manages known_hosts
- Settings: Environment variables
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from browser_updater.config.host_keys import HostKeyVerifier
from browser_updater.config.parser import SSHConfigParser
from browser_updater.config.settings import PREFIX, Settings
from browser_updater.models import SSHHost

logger = logging.getLogger(__name__)


class HostNotAllowedError(ValueError):
    """Target is excluded by BROWSER_UPDATER_ALLOWLIST or _BLOCKLIST."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"host {name} is excluded by the allowlist/blocklist")


def _split_env_list(key: str) -> list[str] | None:
    value = os.getenv(PREFIX + key, "").strip()
    if not value:
        return None
    return [h.strip() for h in value.split(",") if h.strip()]


@dataclass
class Config:
    """Application configuration.

    Aggregates settings from SSH config, known_hosts, and environment.
    """

    settings: Settings
    parser: SSHConfigParser
    host_keys: HostKeyVerifier
    _hosts_cache: dict[str, SSHHost] | None = field(
        default=None, init=False, repr=False
    )

    @classmethod
    def from_env(cls) -> "Config":
        """Create config from environment.

        Raises:
            FileNotFoundError: If strict host key checking is on and no
                known_hosts file exists
        """
        settings = Settings.from_env()
        parser = SSHConfigParser(
            allowlist=_split_env_list("ALLOWLIST"),
            blocklist=_split_env_list("BLOCKLIST"),
        )
        strict = os.getenv(f"{PREFIX}STRICT_HOST_KEY_CHECKING", "true")
        host_keys = HostKeyVerifier(
            known_hosts_path=os.getenv(f"{PREFIX}KNOWN_HOSTS"),
            strict_checking=strict.lower() != "false",
        )
        return cls(settings=settings, parser=parser, host_keys=host_keys)

    @classmethod
    def from_ssh_config(
        cls,
        ssh_config_path: Path | str | None = None,
        settings: Settings | None = None,
    ) -> "Config":
        """Create config from an explicit SSH config path.

        Host key verification is disabled; intended for tests and
        throwaway lab fleets.
        """
        return cls(
            settings=settings or Settings(),
            parser=SSHConfigParser(config_path=ssh_config_path),
            host_keys=HostKeyVerifier(known_hosts_path="none", strict_checking=False),
        )

    def get_hosts(self) -> dict[str, SSHHost]:
        """Get SSH hosts from config, parsed once and cached."""
        if self._hosts_cache is None:
            self._hosts_cache = self.parser.parse()
        return self._hosts_cache

    def get_host(self, name: str) -> SSHHost | None:
        """Get host by SSH config alias."""
        return self.get_hosts().get(name)

    def is_host_allowed(self, name: str) -> bool:
        """Whether the allowlist/blocklist permits targeting name."""
        return self.parser.is_host_allowed(name)

    def excluded_hosts(self, names: list[str]) -> list[str]:
        """Names the allowlist/blocklist forbids, in input order."""
        return [n for n in names if not self.is_host_allowed(n)]

    def resolve_host(self, name: str) -> SSHHost:
        """Resolve a target name to connection parameters.

        Names defined in SSH config use their entry. Any other name is
        connected to directly on port 22 as the configured default user.

        Raises:
            HostNotAllowedError: If the allowlist/blocklist excludes name,
                whether or not it appears in SSH config
        """
        if not self.is_host_allowed(name):
            raise HostNotAllowedError(name)
        ssh_host = self.get_host(name)
        if ssh_host is not None:
            if ssh_host.user is None and self.settings.ssh_user:
                ssh_host = SSHHost(
                    name=ssh_host.name,
                    hostname=ssh_host.hostname,
                    user=self.settings.ssh_user,
                    port=ssh_host.port,
                    identity_file=ssh_host.identity_file,
                )
            return ssh_host
        logger.debug("Host %s not in SSH config, connecting directly", name)
        return SSHHost(name=name, hostname=name, user=self.settings.ssh_user)

    @property
    def max_concurrency(self) -> int:
        """Concurrent worker limit."""
        return self.settings.max_concurrency

    @property
    def idle_timeout(self) -> int:
        """Connection idle timeout in seconds."""
        return self.settings.idle_timeout

    @property
    def max_pool_size(self) -> int:
        """Maximum connection pool size."""
        return self.settings.max_pool_size

    @property
    def transport(self) -> str:
        """Transport type (http or stdio)."""
        return self.settings.transport

    @property
    def http_host(self) -> str:
        """HTTP server bind address."""
        return self.settings.http_host

    @property
    def http_port(self) -> int:
        """HTTP server port."""
        return self.settings.http_port

    @property
    def known_hosts_path(self) -> str | None:
        """Path to known_hosts file or None if disabled."""
        return self.host_keys.get_known_hosts_path()

    @property
    def strict_host_key_checking(self) -> bool:
        """Whether to reject unknown host keys."""
        return self.host_keys.strict_checking
