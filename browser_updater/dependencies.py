"""Dependency injection container for browser_updater.

Every long-lived object is built here once and passed explicitly; nothing
is kept in module globals.
"""

from dataclasses import dataclass

from browser_updater.config import Config
from browser_updater.services.batch import BatchOrchestrator
from browser_updater.services.executors import SSHRemoteExecutor
from browser_updater.services.fetcher import ArtifactFetcher
from browser_updater.services.pool import ConnectionPool
from browser_updater.services.worker import HostUpdateWorker


@dataclass
class Dependencies:
    """Container for browser_updater dependencies.

    Example:
        deps = Dependencies.create()
        try:
            results = await deps.orchestrator.run_batch(["pc-01"], "chrome")
        finally:
            await deps.cleanup()
    """

    config: Config
    pool: ConnectionPool
    executor: SSHRemoteExecutor
    fetcher: ArtifactFetcher
    orchestrator: BatchOrchestrator

    @classmethod
    def create(cls) -> "Dependencies":
        """Create dependencies with configuration from the environment."""
        return cls.from_config(Config.from_env())

    @classmethod
    def from_config(
        cls,
        config: Config,
        max_concurrency: int | None = None,
    ) -> "Dependencies":
        """Create dependencies with custom configuration.

        Args:
            config: Config instance
            max_concurrency: Override for the configured worker limit

        Returns:
            Dependencies wired from config
        """
        settings = config.settings
        concurrency = max_concurrency or config.max_concurrency
        pool = ConnectionPool(
            idle_timeout=config.idle_timeout,
            # Every running worker may hold a connection
            max_size=max(config.max_pool_size, concurrency),
            known_hosts=config.known_hosts_path,
            strict_host_key_checking=config.strict_host_key_checking,
            connect_timeout=settings.connect_timeout,
        )
        executor = SSHRemoteExecutor(pool, config)
        fetcher = ArtifactFetcher(
            download_dir=settings.download_dir,
            timeout=settings.download_timeout,
            seven_zip=settings.seven_zip,
        )
        orchestrator = BatchOrchestrator(
            fetcher=fetcher,
            worker=HostUpdateWorker(executor, settings.remote_staging_dir),
            max_concurrency=concurrency,
        )
        return cls(
            config=config,
            pool=pool,
            executor=executor,
            fetcher=fetcher,
            orchestrator=orchestrator,
        )

    async def cleanup(self) -> None:
        """Clean up resources (close all connections)."""
        await self.pool.close_all()
