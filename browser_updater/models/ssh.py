"""SSH-related data models."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import asyncssh


@dataclass
class SSHHost:
    """SSH host configuration."""

    name: str
    hostname: str
    user: str | None = None
    port: int = 22
    identity_file: str | None = None


@dataclass
class PooledConnection:
    """A pooled SSH connection and the workers currently holding it.

    An install can keep a session busy for many minutes, so idleness is
    measured from the last release, and a held connection is never idle.
    """

    connection: "asyncssh.SSHClientConnection"
    last_used: datetime = field(default_factory=datetime.now)
    leases: int = 0

    def acquire(self) -> None:
        """Record a worker taking the connection."""
        self.leases += 1
        self.last_used = datetime.now()

    def release(self) -> None:
        """Record a worker handing the connection back."""
        self.leases = max(self.leases - 1, 0)
        self.last_used = datetime.now()

    @property
    def in_use(self) -> bool:
        """Whether any worker still holds the connection."""
        return self.leases > 0

    def idle_since(self, cutoff: datetime) -> bool:
        """Whether the connection has been free since before cutoff."""
        return not self.in_use and self.last_used < cutoff

    @property
    def is_stale(self) -> bool:
        """Check if connection was closed."""
        return bool(self.connection.is_closed())
