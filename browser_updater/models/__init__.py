"""Data models for browser_updater."""

from browser_updater.models.artifact import InstallArtifact
from browser_updater.models.command import (
    CommandResult,
    EnsureDirectoryCommand,
    InstallCommand,
    ProbeKind,
    ProbeRequest,
    ProbeResult,
    RemoteCommand,
    RemoveFileCommand,
)
from browser_updater.models.product import PRODUCTS, Product, ProductProfile
from browser_updater.models.result import HostResult, Outcome
from browser_updater.models.ssh import PooledConnection, SSHHost
from browser_updater.models.target import UpdateTarget

__all__ = [
    "CommandResult",
    "EnsureDirectoryCommand",
    "HostResult",
    "InstallArtifact",
    "InstallCommand",
    "Outcome",
    "PRODUCTS",
    "PooledConnection",
    "ProbeKind",
    "ProbeRequest",
    "ProbeResult",
    "Product",
    "ProductProfile",
    "RemoteCommand",
    "RemoveFileCommand",
    "SSHHost",
    "UpdateTarget",
]
