"""Application settings from environment variables.

Centralized environment variable parsing and validation. Every variable is
prefixed with BROWSER_UPDATER_; invalid values are logged and replaced by
their default.
"""

import logging
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

PREFIX = "BROWSER_UPDATER_"


def _default_download_dir() -> Path:
    return Path(tempfile.gettempdir()) / "browser_updater"


@dataclass
class Settings:
    """Application settings from environment."""

    # Fleet throttle
    max_concurrency: int = field(default=16)

    # Timeouts (seconds)
    connect_timeout: int = field(default=15)
    probe_timeout: int = field(default=60)
    install_timeout: int = field(default=1800)
    download_timeout: int = field(default=300)

    # Artifact handling
    download_dir: Path = field(default_factory=_default_download_dir)
    remote_staging_dir: str = field(default=r"C:\Windows\Temp\browser_updater")
    seven_zip: str = field(default="7z")

    # SSH
    ssh_user: str | None = field(default=None)
    idle_timeout: int = field(default=60)
    max_pool_size: int = field(default=100)

    # MCP transport
    transport: str = field(default="http")
    http_host: str = field(default="0.0.0.0")
    http_port: int = field(default=8000)

    # Logging
    log_level: str = field(default="INFO")
    log_colors: bool = field(default=True)

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from environment variables.

        Returns:
            Settings instance with values from environment
        """
        download_dir = os.getenv(f"{PREFIX}DOWNLOAD_DIR")
        return cls(
            max_concurrency=cls._get_positive_int("MAX_CONCURRENCY", 16),
            connect_timeout=cls._get_positive_int("CONNECT_TIMEOUT", 15),
            probe_timeout=cls._get_positive_int("PROBE_TIMEOUT", 60),
            install_timeout=cls._get_positive_int("INSTALL_TIMEOUT", 1800),
            download_timeout=cls._get_positive_int("DOWNLOAD_TIMEOUT", 300),
            download_dir=(
                Path(download_dir).expanduser()
                if download_dir
                else _default_download_dir()
            ),
            remote_staging_dir=os.getenv(
                f"{PREFIX}REMOTE_STAGING_DIR", r"C:\Windows\Temp\browser_updater"
            ),
            seven_zip=os.getenv(f"{PREFIX}SEVEN_ZIP", "7z"),
            ssh_user=os.getenv(f"{PREFIX}SSH_USER") or None,
            idle_timeout=cls._get_positive_int("IDLE_TIMEOUT", 60),
            max_pool_size=cls._get_positive_int("MAX_POOL_SIZE", 100),
            transport=cls._get_transport(),
            http_host=os.getenv(f"{PREFIX}HTTP_HOST", "0.0.0.0"),
            http_port=cls._get_positive_int("HTTP_PORT", 8000),
            log_level=os.getenv(f"{PREFIX}LOG_LEVEL", "INFO").upper(),
            log_colors=cls._get_bool("LOG_COLORS", True),
        )

    @staticmethod
    def _get_positive_int(key: str, default: int) -> int:
        """Get a positive integer from environment.

        Args:
            key: Variable name without prefix
            default: Default value if unset or invalid

        Returns:
            Integer value from environment or default
        """
        value = os.getenv(PREFIX + key)
        if value is None:
            return default

        try:
            parsed = int(value)
        except ValueError:
            logger.warning(
                "Invalid int for %s%s: %s, using default %d",
                PREFIX,
                key,
                value,
                default,
            )
            return default

        if parsed <= 0:
            logger.warning(
                "%s%s must be > 0, got %d. Using default: %d",
                PREFIX,
                key,
                parsed,
                default,
            )
            return default
        return parsed

    @staticmethod
    def _get_bool(key: str, default: bool) -> bool:
        """Get boolean from environment."""
        value = os.getenv(PREFIX + key)
        if value is None:
            return default
        return value.lower() in ("1", "true", "yes", "on")

    @staticmethod
    def _get_transport() -> str:
        """Get MCP transport ("http" or "stdio")."""
        transport = os.getenv(f"{PREFIX}TRANSPORT", "").lower()
        if transport in ("http", "stdio"):
            return transport
        return "http"
