"""Services for browser_updater."""

from browser_updater.services.batch import BatchOrchestrator
from browser_updater.services.connection import (
    ConnectivityError,
    acquire_with_retry,
)
from browser_updater.services.decision import Observation, classify
from browser_updater.services.executors import SSHRemoteExecutor, TransferError
from browser_updater.services.fetcher import ArtifactFetcher, FetchError
from browser_updater.services.pool import ConnectionPool
from browser_updater.services.version import Ordering, Version, compare, parse_version
from browser_updater.services.worker import HostUpdateWorker

__all__ = [
    "ArtifactFetcher",
    "BatchOrchestrator",
    "ConnectionPool",
    "ConnectivityError",
    "FetchError",
    "HostUpdateWorker",
    "Observation",
    "Ordering",
    "SSHRemoteExecutor",
    "TransferError",
    "Version",
    "acquire_with_retry",
    "classify",
    "compare",
    "parse_version",
]
