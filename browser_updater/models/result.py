"""Per-host update outcome data models."""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from browser_updater.services.version import Version


class Outcome(Enum):
    """Classification of what happened on one host."""

    UPDATED = "Updated"
    ALREADY_CURRENT = "AlreadyCurrent"
    FAILED = "Failed"
    NEEDS_RESTART = "NeedsRestart"
    UNKNOWN = "Unknown"
    UNREACHABLE = "Unreachable"

    @property
    def label(self) -> str:
        """Human readable label for reports."""
        return _LABELS[self]

    @property
    def is_success(self) -> bool:
        """Whether the host ended on the installer version or newer."""
        return self in (Outcome.UPDATED, Outcome.ALREADY_CURRENT)


_LABELS = {
    Outcome.UPDATED: "Updated",
    Outcome.ALREADY_CURRENT: "Already current",
    Outcome.FAILED: "Failed",
    Outcome.NEEDS_RESTART: "Needs restart",
    Outcome.UNKNOWN: "Unknown",
    Outcome.UNREACHABLE: "Unreachable",
}


@dataclass(frozen=True)
class HostResult:
    """Immutable outcome record for one target."""

    host_name: str
    outcome: Outcome
    old_version: "Version | None" = None
    installer_version: "Version | None" = None
    new_version: "Version | None" = None
