"""Batch orchestration across many hosts.

The installer is fetched once per batch, then one worker per target runs
under a semaphore. Results come back in input order, one per target,
whatever happens to individual hosts. Batches may overlap on one
orchestrator; each has its own artifact and its own cancellation flag.
"""

import asyncio
import logging
from collections import Counter

from browser_updater.models import (
    PRODUCTS,
    HostResult,
    InstallArtifact,
    Outcome,
    Product,
    UpdateTarget,
)
from browser_updater.protocols import InstallerSource
from browser_updater.services.fetcher import FetchError
from browser_updater.services.worker import HostUpdateWorker

logger = logging.getLogger(__name__)

DEFAULT_MAX_CONCURRENCY = 16


class BatchOrchestrator:
    """Runs an update across a set of hosts with bounded concurrency."""

    def __init__(
        self,
        fetcher: InstallerSource,
        worker: HostUpdateWorker,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
    ) -> None:
        """Initialize orchestrator.

        Args:
            fetcher: Source of the shared installer artifact
            worker: Per-host worker
            max_concurrency: Maximum number of hosts processed at once

        Raises:
            ValueError: If max_concurrency is not positive
        """
        if max_concurrency <= 0:
            raise ValueError(f"max_concurrency must be positive, got {max_concurrency}")
        self.fetcher = fetcher
        self.worker = worker
        self.max_concurrency = max_concurrency
        self._running: set[asyncio.Event] = set()

    @property
    def active_batches(self) -> int:
        """Number of batches currently running."""
        return len(self._running)

    def cancel(self) -> None:
        """Stop dispatching in every running batch; started workers finish.

        Batches started afterwards are unaffected.
        """
        pending = [e for e in self._running if not e.is_set()]
        if pending:
            logger.warning(
                "Cancellation requested for %d batch(es), no further hosts will start",
                len(pending),
            )
        for event in pending:
            event.set()

    async def run_batch(
        self,
        targets: list[str],
        product: Product | str,
    ) -> list[HostResult]:
        """Update every target host.

        Args:
            targets: Host names; duplicates are processed independently
            product: Browser to update

        Returns:
            One result per target, in input order; empty for no targets

        Raises:
            ValueError: If product is unknown
        """
        if not isinstance(product, Product):
            product = Product.parse(product)
        if not targets:
            return []

        cancelled = asyncio.Event()
        profile = PRODUCTS[product]
        logger.info(
            "Starting %s update for %d host(s) (concurrency=%d)",
            profile.display_name,
            len(targets),
            self.max_concurrency,
        )

        artifact: InstallArtifact | None = None
        self._running.add(cancelled)
        try:
            try:
                artifact = await self.fetcher.fetch(product)
            except FetchError as e:
                logger.warning("%s; continuing in degraded mode", e)

            semaphore = asyncio.Semaphore(self.max_concurrency)
            results = await asyncio.gather(
                *(
                    self._dispatch(
                        semaphore,
                        cancelled,
                        UpdateTarget(host=host, product=product),
                        artifact,
                    )
                    for host in targets
                )
            )
        finally:
            self._running.discard(cancelled)
            if artifact is not None:
                self.fetcher.cleanup(artifact)

        counts = Counter(r.outcome for r in results)
        logger.info(
            "Batch complete: %s",
            ", ".join(f"{o.label}={counts[o]}" for o in Outcome if counts[o]),
        )
        return list(results)

    async def _dispatch(
        self,
        semaphore: asyncio.Semaphore,
        cancelled: asyncio.Event,
        target: UpdateTarget,
        artifact: InstallArtifact | None,
    ) -> HostResult:
        async with semaphore:
            if cancelled.is_set():
                logger.info("%s: not started (cancelled)", target.host)
                return self._unknown(target, artifact)
            try:
                return await self.worker.run(target, artifact)
            except Exception:
                logger.exception("%s: unexpected error during update", target.host)
                return self._unknown(target, artifact)

    @staticmethod
    def _unknown(
        target: UpdateTarget, artifact: InstallArtifact | None
    ) -> HostResult:
        return HostResult(
            host_name=target.host,
            outcome=Outcome.UNKNOWN,
            installer_version=artifact.version if artifact else None,
        )
