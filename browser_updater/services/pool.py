"""SSH connection pool for fleet updates.

Every worker for a host shares one connection. A worker leases the
connection with ``acquire`` and hands it back with ``release``; an install
may hold its lease for as long as the install timeout allows.

Reclaiming:
- The sweeper closes connections that are closed by the peer, or that
  nobody has held for ``idle_timeout`` seconds. Leased connections are
  never idle.
- When the pool is full, the least recently used unleased connection is
  closed to make room. If every pooled connection is leased the pool grows
  past ``max_size`` rather than cut off a running install; size the pool to
  at least the worker count to avoid that.

Locking:
- ``_meta_lock`` guards the structure of ``_connections`` and ``_host_locks``.
- A per-host lock serializes connecting to and dropping one host, so two
  workers never open two sessions to the same machine.
- Per-host lock first, then the meta lock.
"""

import asyncio
import logging
from collections import OrderedDict
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any

import asyncssh

from browser_updater.models import PooledConnection

if TYPE_CHECKING:
    from browser_updater.models import SSHHost

logger = logging.getLogger(__name__)


class ConnectionPool:
    """Leased SSH connections keyed by host name."""

    def __init__(
        self,
        idle_timeout: int = 60,
        max_size: int = 100,
        known_hosts: str | None = None,
        strict_host_key_checking: bool = True,
        connect_timeout: float = 15.0,
    ) -> None:
        """Initialize pool.

        Args:
            idle_timeout: Seconds an unleased connection stays open
            max_size: Number of connections kept before unleased ones are
                evicted (must be > 0)
            known_hosts: Path to known_hosts file, or None to disable verification
            strict_host_key_checking: Whether to reject unknown host keys
            connect_timeout: Seconds allowed for establishing a connection

        Raises:
            ValueError: If max_size is not positive
        """
        if max_size <= 0:
            raise ValueError(f"max_size must be > 0, got {max_size}")

        self.idle_timeout = idle_timeout
        self.max_size = max_size
        self.connect_timeout = connect_timeout
        self._connections: OrderedDict[str, PooledConnection] = OrderedDict()
        self._host_locks: dict[str, asyncio.Lock] = {}
        self._meta_lock = asyncio.Lock()
        self._sweeper: asyncio.Task[Any] | None = None

        self._known_hosts = known_hosts
        self._strict_host_key = strict_host_key_checking

        if self._known_hosts is None:
            logger.warning(
                "SSH host key verification DISABLED; installers may be pushed "
                "to impostor hosts. Set BROWSER_UPDATER_KNOWN_HOSTS to a "
                "known_hosts file."
            )
        else:
            logger.info(
                "SSH host key verification enabled (known_hosts=%s, strict=%s)",
                self._known_hosts,
                self._strict_host_key,
            )

        logger.debug(
            "ConnectionPool initialized (idle_timeout=%ds, max_size=%d)",
            idle_timeout,
            max_size,
        )

    async def _host_lock(self, host_name: str) -> asyncio.Lock:
        async with self._meta_lock:
            return self._host_locks.setdefault(host_name, asyncio.Lock())

    async def _make_room(self) -> None:
        """Close unleased connections, oldest first, until one more fits."""
        evicted: list[tuple[str, PooledConnection]] = []

        async with self._meta_lock:
            while len(self._connections) >= self.max_size:
                victim = next(
                    (name for name, p in self._connections.items() if not p.in_use),
                    None,
                )
                if victim is None:
                    logger.warning(
                        "All %d pooled connections are in use; growing past "
                        "max_size=%d",
                        len(self._connections),
                        self.max_size,
                    )
                    break
                evicted.append((victim, self._connections.pop(victim)))

        for name, pooled in evicted:
            logger.info("Pool full, closing least recently used connection to %s", name)
            pooled.connection.close()

    async def _connect(
        self, host: "SSHHost", known_hosts: str | None
    ) -> asyncssh.SSHClientConnection:
        client_keys = [host.identity_file] if host.identity_file else None
        return await asyncssh.connect(
            host.hostname,
            port=host.port,
            username=host.user,
            known_hosts=known_hosts,
            client_keys=client_keys,
            connect_timeout=self.connect_timeout,
        )

    async def _open(self, host: "SSHHost") -> asyncssh.SSHClientConnection:
        logger.info(
            "Opening SSH connection to %s (%s@%s:%d)",
            host.name,
            host.user or "<default>",
            host.hostname,
            host.port,
        )
        try:
            return await self._connect(host, self._known_hosts)
        except asyncssh.HostKeyNotVerifiable as e:
            if self._strict_host_key:
                logger.error(
                    "Host key verification failed for %s: %s. "
                    "Add the host key to %s or set "
                    "BROWSER_UPDATER_STRICT_HOST_KEY_CHECKING=false",
                    host.name,
                    e,
                    self._known_hosts,
                )
                raise
            logger.warning(
                "Host key not verified for %s (strict mode disabled): %s",
                host.name,
                e,
            )
            return await self._connect(host, None)

    async def acquire(self, host: "SSHHost") -> asyncssh.SSHClientConnection:
        """Lease a connection to the host, connecting if needed.

        Every successful call must be paired with ``release``.
        """
        async with await self._host_lock(host.name):
            pooled = self._connections.get(host.name)

            if pooled is not None and pooled.is_stale:
                logger.info("Connection to %s was closed, reconnecting", host.name)
                async with self._meta_lock:
                    self._connections.pop(host.name, None)
                pooled = None

            if pooled is None:
                await self._make_room()
                pooled = PooledConnection(connection=await self._open(host))
                async with self._meta_lock:
                    self._connections[host.name] = pooled
                logger.info(
                    "SSH connection established to %s (pool_size=%d/%d)",
                    host.name,
                    len(self._connections),
                    self.max_size,
                )
                self._start_sweeper()

            pooled.acquire()
            async with self._meta_lock:
                self._connections.move_to_end(host.name)
            logger.debug("Leased %s (leases=%d)", host.name, pooled.leases)
            return pooled.connection

    def release(
        self, host_name: str, connection: asyncssh.SSHClientConnection
    ) -> None:
        """Hand back a leased connection.

        Connections dropped while leased are no longer pooled and are
        ignored.
        """
        pooled = self._connections.get(host_name)
        if pooled is None or pooled.connection is not connection:
            return
        pooled.release()
        logger.debug("Released %s (leases=%d)", host_name, pooled.leases)

    def _start_sweeper(self) -> None:
        if self._sweeper is None or self._sweeper.done():
            self._sweeper = asyncio.create_task(self._sweep_loop())
            logger.debug("Started connection sweeper")

    async def _sweep_loop(self) -> None:
        interval = max(self.idle_timeout // 2, 1)
        while self._connections:
            await asyncio.sleep(interval)
            await self._sweep()
        logger.debug("Connection sweeper stopped, pool empty")

    async def _sweep(self) -> None:
        """Close connections that are dead, or unleased for idle_timeout."""
        async with self._meta_lock:
            host_names = list(self._connections)

        cutoff = datetime.now() - timedelta(seconds=self.idle_timeout)
        for host_name in host_names:
            async with await self._host_lock(host_name):
                pooled = self._connections.get(host_name)
                if pooled is None:
                    continue
                if pooled.is_stale:
                    reason = "closed"
                elif pooled.idle_since(cutoff):
                    reason = "idle"
                else:
                    continue
                logger.info("Dropping %s connection to %s", reason, host_name)
                async with self._meta_lock:
                    del self._connections[host_name]
                pooled.connection.close()

    async def remove_connection(self, host_name: str) -> None:
        """Close and forget the connection to a host, leased or not.

        Used after a session error; safe for hosts without a connection.
        """
        async with await self._host_lock(host_name):
            async with self._meta_lock:
                pooled = self._connections.pop(host_name, None)
            if pooled is not None:
                logger.info(
                    "Removing connection to %s (pool_size=%d)",
                    host_name,
                    len(self._connections),
                )
                pooled.connection.close()

    async def close_all(self) -> None:
        """Close every connection and stop the sweeper."""
        async with self._meta_lock:
            host_names = list(self._connections)

        if host_names:
            logger.info("Closing all %d connection(s)", len(host_names))
            for host_name in host_names:
                await self.remove_connection(host_name)

        if self._sweeper and not self._sweeper.done():
            self._sweeper.cancel()

    @property
    def pool_size(self) -> int:
        """Number of pooled connections."""
        return len(self._connections)

    @property
    def active_hosts(self) -> list[str]:
        """Pooled host names, least recently used first."""
        return list(self._connections)

    @property
    def leased_hosts(self) -> list[str]:
        """Hosts whose connection is held by at least one worker."""
        return [name for name, p in self._connections.items() if p.in_use]
