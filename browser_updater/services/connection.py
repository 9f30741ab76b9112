"""SSH connection helper with automatic retry."""

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import asyncssh

    from browser_updater.models import SSHHost
    from browser_updater.protocols import SSHConnectionPool

logger = logging.getLogger(__name__)


class ConnectivityError(Exception):
    """Host could not be reached, or the session was lost or timed out."""

    def __init__(self, host_name: str, original_error: BaseException):
        """Initialize connectivity error.

        Args:
            host_name: Name of the target host
            original_error: Original exception that caused the failure
        """
        self.host_name = host_name
        self.original_error = original_error
        detail = str(original_error) or type(original_error).__name__
        super().__init__(f"Cannot reach {host_name}: {detail}")


async def acquire_with_retry(
    pool: "SSHConnectionPool",
    ssh_host: "SSHHost",
) -> "asyncssh.SSHClientConnection":
    """Lease an SSH connection, retrying once on failure.

    If the first attempt fails the possibly stale pooled connection is
    dropped and a fresh connection is attempted once more. The caller must
    hand the connection back with pool.release.

    Args:
        pool: Connection pool to draw from
        ssh_host: SSH host configuration

    Returns:
        Leased SSH connection

    Raises:
        ConnectivityError: If connection fails after retry
    """
    try:
        return await pool.acquire(ssh_host)
    except Exception as first_error:
        logger.warning(
            "Connection to %s failed: %s, retrying after cleanup",
            ssh_host.name,
            first_error,
        )
        try:
            await pool.remove_connection(ssh_host.name)
            conn = await pool.acquire(ssh_host)
            logger.info("Retry connection to %s succeeded", ssh_host.name)
            return conn
        except Exception as retry_error:
            logger.error(
                "Retry connection to %s failed: %s",
                ssh_host.name,
                retry_error,
            )
            raise ConnectivityError(ssh_host.name, retry_error) from retry_error
