"""Protocol interfaces for dependency inversion.

The update core depends on these abstractions, never on the asyncssh
implementation, so tests and alternative transports can plug in freely.

Usage Example:

    from browser_updater.protocols import RemoteExecutor

    async def installed_version(executor: RemoteExecutor, host: str) -> str:
        result = await executor.probe(host, ProbeRequest.file_version(path))
        return result.value

    # Production: SSH + PowerShell
    from browser_updater.services.executors import SSHRemoteExecutor

    # Tests: any object with matching async methods
    class FakeExecutor:
        async def probe(self, host, request): ...
        async def execute(self, host, command): ...
        async def upload(self, host, local_path, remote_path): ...
"""

from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from browser_updater.models import (
    CommandResult,
    InstallArtifact,
    ProbeRequest,
    ProbeResult,
    Product,
    RemoteCommand,
    SSHHost,
)


@runtime_checkable
class SSHConnectionPool(Protocol):
    """Protocol for SSH connection pooling."""

    async def acquire(self, host: SSHHost) -> Any:
        """Lease a connection to host, connecting if needed.

        Raises:
            Exception: Any transport error; callers wrap it
        """
        ...

    def release(self, host_name: str, connection: Any) -> None:
        """Hand back a connection leased with acquire."""
        ...

    async def remove_connection(self, host_name: str) -> None:
        """Remove connection from pool.

        Note:
            Safe to call even if connection doesn't exist.
        """
        ...

    async def close_all(self) -> None:
        """Close all connections in pool."""
        ...


@runtime_checkable
class RemoteExecutor(Protocol):
    """Runs units of work on a named host.

    Every method raises ConnectivityError when the host cannot be reached
    or the session is lost or times out.
    """

    async def execute(self, host: str, command: RemoteCommand) -> CommandResult:
        """Run a state-changing command and wait for it to finish.

        Args:
            host: Target host name
            command: Typed command object

        Returns:
            Command output and exit status

        Raises:
            ConnectivityError: If the host is unreachable
        """
        ...

    async def probe(self, host: str, request: ProbeRequest) -> ProbeResult:
        """Ask a read-only question of a host.

        Args:
            host: Target host name
            request: Typed probe request

        Returns:
            Probe answer; ok=False when the subject could not be inspected

        Raises:
            ConnectivityError: If the host is unreachable
        """
        ...

    async def upload(self, host: str, local_path: Path, remote_path: str) -> None:
        """Copy a local file to the host.

        Raises:
            ConnectivityError: If the host is unreachable
            TransferError: If the copy itself fails
        """
        ...


@runtime_checkable
class InstallerSource(Protocol):
    """Provides the installer artifact for a batch."""

    async def fetch(self, product: Product) -> InstallArtifact:
        """Download the latest installer and determine its version.

        Raises:
            FetchError: If the artifact or its version is unavailable
        """
        ...

    def cleanup(self, artifact: InstallArtifact) -> None:
        """Remove the local copy of an artifact."""
        ...


__all__ = [
    "InstallerSource",
    "RemoteExecutor",
    "SSHConnectionPool",
]
