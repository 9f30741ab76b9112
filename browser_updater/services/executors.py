"""RemoteExecutor implementation over SSH and PowerShell.

Targets are Windows hosts running OpenSSH. Probes and commands are rendered
to PowerShell and sent as encoded commands; installers are staged with SFTP.
"""

import logging
from pathlib import Path, PureWindowsPath
from typing import TYPE_CHECKING

import asyncssh

from browser_updater.config import HostNotAllowedError
from browser_updater.models import (
    CommandResult,
    InstallCommand,
    ProbeRequest,
    ProbeResult,
    RemoteCommand,
)
from browser_updater.services.connection import (
    ConnectivityError,
    acquire_with_retry,
)
from browser_updater.services.powershell import render_command, render_probe
from browser_updater.utils.shell import encode_powershell

if TYPE_CHECKING:
    from browser_updater.config import Config
    from browser_updater.protocols import SSHConnectionPool

logger = logging.getLogger(__name__)


class TransferError(Exception):
    """Copying a file to a host failed while the host stayed reachable."""

    def __init__(self, host_name: str, path: str, original_error: Exception):
        """Initialize transfer error.

        Args:
            host_name: Name of the target host
            path: Remote destination path
            original_error: Original exception that caused the failure
        """
        self.host_name = host_name
        self.path = path
        self.original_error = original_error
        super().__init__(f"Upload to {host_name}:{path} failed: {original_error}")


def _decode(stream: str | bytes | None) -> str:
    """Normalize asyncssh stdout/stderr to text."""
    if stream is None:
        return ""
    if isinstance(stream, bytes):
        return stream.decode("utf-8", errors="replace")
    return stream


def to_sftp_path(remote_path: str) -> str:
    """Convert a Windows path to the form Windows OpenSSH's SFTP expects.

    ``C:\\Windows\\Temp\\x.msi`` becomes ``/C:/Windows/Temp/x.msi``.
    """
    posix = PureWindowsPath(remote_path).as_posix()
    if len(posix) >= 2 and posix[1] == ":":
        return "/" + posix
    return posix


class SSHRemoteExecutor:
    """Runs probes and commands on Windows hosts over pooled SSH connections."""

    def __init__(
        self,
        pool: "SSHConnectionPool",
        config: "Config",
    ) -> None:
        """Initialize executor.

        Args:
            pool: Connection pool shared by all workers
            config: Config used to resolve host names and timeouts
        """
        self.pool = pool
        self.config = config

    async def _connection(self, host: str) -> asyncssh.SSHClientConnection:
        """Lease a connection; excluded hosts are never contacted."""
        try:
            ssh_host = self.config.resolve_host(host)
        except HostNotAllowedError as e:
            raise ConnectivityError(host, e) from e
        return await acquire_with_retry(self.pool, ssh_host)

    async def _run(self, host: str, script: str, timeout: int) -> CommandResult:
        """Run a PowerShell script and collect its result.

        Raises:
            ConnectivityError: On connection loss, SSH error or timeout
        """
        conn = await self._connection(host)
        logger.debug("Running on %s (timeout=%ds): %s", host, timeout, script)
        try:
            result = await conn.run(
                encode_powershell(script), check=False, timeout=timeout
            )
        except (asyncssh.Error, asyncssh.ProcessError, OSError, TimeoutError) as e:
            # Drop the session so the next call reconnects
            await self.pool.remove_connection(host)
            raise ConnectivityError(host, e) from e
        finally:
            self.pool.release(host, conn)

        returncode = result.returncode if result.returncode is not None else -1
        return CommandResult(
            output=_decode(result.stdout),
            error=_decode(result.stderr),
            returncode=returncode,
        )

    async def execute(self, host: str, command: RemoteCommand) -> CommandResult:
        """Run a state-changing command and wait for it to finish."""
        settings = self.config.settings
        timeout = (
            settings.install_timeout
            if isinstance(command, InstallCommand)
            else settings.probe_timeout
        )
        result = await self._run(host, render_command(command), timeout)
        if not result.ok:
            logger.debug(
                "%s on %s exited with %d: %s",
                type(command).__name__,
                host,
                result.returncode,
                result.error.strip(),
            )
        return result

    async def probe(self, host: str, request: ProbeRequest) -> ProbeResult:
        """Ask a read-only question of a host."""
        result = await self._run(
            host, render_probe(request), self.config.settings.probe_timeout
        )
        return ProbeResult(ok=result.ok, value=result.output.strip())

    async def upload(self, host: str, local_path: Path, remote_path: str) -> None:
        """Copy a local file to the host over SFTP."""
        conn = await self._connection(host)
        target = to_sftp_path(remote_path)
        logger.debug("Uploading %s to %s:%s", local_path, host, target)
        try:
            async with conn.start_sftp_client() as sftp:
                await sftp.put(str(local_path), target)
        except (asyncssh.SFTPError, OSError) as e:
            raise TransferError(host, remote_path, e) from e
        except asyncssh.Error as e:
            await self.pool.remove_connection(host)
            raise ConnectivityError(host, e) from e
        finally:
            self.pool.release(host, conn)
