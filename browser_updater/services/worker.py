"""Per-host update worker.

One worker handles one target: read the installed version, skip when it is
current, otherwise stage the installer, run it, and read the version and
process state back. The staged copy on the host is removed on every exit
path. Connectivity failures become an UNREACHABLE result instead of an
exception so sibling workers are unaffected.
"""

import logging
from dataclasses import dataclass, field
from pathlib import PureWindowsPath

from browser_updater.models import (
    PRODUCTS,
    EnsureDirectoryCommand,
    HostResult,
    InstallArtifact,
    InstallCommand,
    Outcome,
    ProbeRequest,
    RemoveFileCommand,
    UpdateTarget,
)
from browser_updater.protocols import RemoteExecutor
from browser_updater.services.connection import ConnectivityError
from browser_updater.services.decision import Observation, classify
from browser_updater.services.executors import TransferError
from browser_updater.services.version import Ordering, Version, compare, parse_version

logger = logging.getLogger(__name__)


@dataclass
class _InstallAttempt:
    post_install_version: Version | None = None
    process_running: bool = False
    notes: list[str] = field(default_factory=list)


class HostUpdateWorker:
    """Runs the check-skip-install-verify sequence for one host."""

    def __init__(self, executor: RemoteExecutor, staging_dir: str) -> None:
        """Initialize worker.

        Args:
            executor: Remote executor used for every host interaction
            staging_dir: Directory on targets receiving the installer copy
        """
        self.executor = executor
        self.staging_dir = staging_dir

    def staging_path(self, artifact: InstallArtifact) -> str:
        """Remote path of the staged installer copy."""
        return str(PureWindowsPath(self.staging_dir) / artifact.file_name)

    async def run(
        self,
        target: UpdateTarget,
        artifact: InstallArtifact | None,
    ) -> HostResult:
        """Update one host.

        Args:
            target: Host and product
            artifact: Shared installer, or None in degraded mode

        Returns:
            Outcome record for the host; never raises ConnectivityError
        """
        try:
            return await self._run(target, artifact)
        except ConnectivityError as e:
            if artifact is None:
                logger.warning("%s: %s (degraded mode)", target.host, e)
                return HostResult(host_name=target.host, outcome=Outcome.UNKNOWN)
            logger.warning("%s: %s", target.host, e)
            return HostResult(host_name=target.host, outcome=Outcome.UNREACHABLE)

    async def _installed_version(self, target: UpdateTarget) -> Version | None:
        profile = PRODUCTS[target.product]
        result = await self.executor.probe(
            target.host, ProbeRequest.file_version(*profile.install_paths)
        )
        if not result.ok:
            logger.debug("%s: %s not installed", target.host, profile.display_name)
            return None
        version = parse_version(result.value)
        if version is None:
            logger.debug(
                "%s: unparsable installed version %r", target.host, result.value
            )
        return version

    async def _run(
        self,
        target: UpdateTarget,
        artifact: InstallArtifact | None,
    ) -> HostResult:
        old_version = await self._installed_version(target)

        if artifact is None:
            outcome = classify(Observation(old_version, None, degraded=True))
            return HostResult(
                host_name=target.host,
                outcome=outcome,
                old_version=old_version,
            )

        installer_version = artifact.version
        ordering = compare(old_version, installer_version)

        if ordering is not Ordering.LESS_THAN:
            logger.info(
                "%s: %s %s is current (installer %s), skipping",
                target.host,
                PRODUCTS[target.product].display_name,
                old_version,
                installer_version,
            )
            outcome = classify(Observation(old_version, installer_version))
            return HostResult(
                host_name=target.host,
                outcome=outcome,
                old_version=old_version,
                installer_version=installer_version,
                new_version=old_version,
            )

        logger.info(
            "%s: updating %s %s -> %s",
            target.host,
            PRODUCTS[target.product].display_name,
            old_version or "(not installed)",
            installer_version,
        )
        attempt = await self._install(target, artifact, old_version)

        outcome = classify(
            Observation(
                old_version=old_version,
                installer_version=installer_version,
                attempted_install=True,
                post_install_version=attempt.post_install_version,
                process_running=attempt.process_running,
            )
        )
        log = logger.info if outcome is Outcome.UPDATED else logger.warning
        log(
            "%s: %s (now %s)%s",
            target.host,
            outcome.label,
            attempt.post_install_version or "not installed",
            "".join(f"; {n}" for n in attempt.notes),
        )
        return HostResult(
            host_name=target.host,
            outcome=outcome,
            old_version=old_version,
            installer_version=installer_version,
            new_version=attempt.post_install_version,
        )

    async def _install(
        self,
        target: UpdateTarget,
        artifact: InstallArtifact,
        old_version: Version | None,
    ) -> _InstallAttempt:
        """Stage, run and verify the installer; always remove the staged copy."""
        profile = PRODUCTS[target.product]
        remote_path = self.staging_path(artifact)
        attempt = _InstallAttempt()

        try:
            await self.executor.execute(
                target.host, EnsureDirectoryCommand(self.staging_dir)
            )
            try:
                await self.executor.upload(
                    target.host, artifact.local_path, remote_path
                )
            except TransferError as e:
                # Nothing ran, so the host is exactly as before
                attempt.notes.append(str(e))
                attempt.post_install_version = old_version
                return attempt

            result = await self.executor.execute(
                target.host, InstallCommand(target.product, remote_path)
            )
            if not result.ok:
                attempt.notes.append(f"installer exited with {result.returncode}")

            attempt.post_install_version = await self._installed_version(target)
            running = await self.executor.probe(
                target.host, ProbeRequest.process_running(profile.process_name)
            )
            attempt.process_running = running.as_bool
            return attempt
        finally:
            await self._remove_staged_copy(target.host, remote_path)

    async def _remove_staged_copy(self, host: str, remote_path: str) -> None:
        try:
            result = await self.executor.execute(host, RemoveFileCommand(remote_path))
        except ConnectivityError as e:
            logger.warning(
                "%s: cannot remove staged installer %s: %s", host, remote_path, e
            )
            return
        if not result.ok:
            logger.warning(
                "%s: cannot remove staged installer %s: %s",
                host,
                remote_path,
                result.error.strip() or f"exit {result.returncode}",
            )
        else:
            logger.debug("%s: removed staged installer %s", host, remote_path)
