"""SSH host key verification settings for fleet connections."""

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

DISABLED = "none"


class HostKeyVerifier:
    """Decides which known_hosts file asyncssh verifies fleet hosts against.

    Fleets are often provisioned faster than their keys are collected, so a
    missing known_hosts file is fatal only in strict mode.
    """

    def __init__(
        self,
        known_hosts_path: str | None = None,
        strict_checking: bool = True,
    ):
        """Initialize host key verifier.

        Args:
            known_hosts_path: Path to known_hosts, or 'none' to disable
            strict_checking: Reject unknown host keys and missing files

        Raises:
            FileNotFoundError: If strict mode and the file is missing
        """
        self.strict_checking = strict_checking
        self._known_hosts = self._resolve(known_hosts_path)

    def _resolve(self, value: str | None) -> str | None:
        if value and value.lower() == DISABLED:
            logger.critical(
                "SSH HOST KEY VERIFICATION DISABLED for all fleet hosts. "
                "Installers will be pushed to hosts whose identity is unverified."
            )
            return None

        if value:
            path = Path(os.path.expanduser(value))
        else:
            path = Path.home() / ".ssh" / "known_hosts"

        if path.exists():
            return str(path)

        if self.strict_checking:
            raise FileNotFoundError(
                f"known_hosts file not found: {path}\n"
                f"Collect fleet keys with: ssh-keyscan <host> >> {path}\n"
                f"or set BROWSER_UPDATER_STRICT_HOST_KEY_CHECKING=false, "
                f"or BROWSER_UPDATER_KNOWN_HOSTS=none (NOT RECOMMENDED)"
            )

        logger.warning(
            "known_hosts not found at %s, host key verification disabled",
            path,
        )
        return None

    def get_known_hosts_path(self) -> str | None:
        """Path to known_hosts, or None when verification is disabled."""
        return self._known_hosts
