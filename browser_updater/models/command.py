"""Remote command and probe data models.

Probes and commands describe *what* to do on a target. Turning them into
something a host can run is the executor's job.
"""

from dataclasses import dataclass
from enum import Enum

from browser_updater.models.product import Product


@dataclass
class CommandResult:
    """Result of a remote command execution."""

    output: str
    error: str
    returncode: int

    @property
    def ok(self) -> bool:
        """Whether the command exited with status 0."""
        return self.returncode == 0


class ProbeKind(Enum):
    """Kind of read-only question asked of a target."""

    FILE_VERSION = "file_version"
    PROCESS_RUNNING = "process_running"


@dataclass(frozen=True)
class ProbeRequest:
    """Typed read-only query against a target.

    For FILE_VERSION the subjects are candidate executable paths, checked in
    order; the first existing file answers. For PROCESS_RUNNING the single
    subject is a process name without extension.
    """

    kind: ProbeKind
    subjects: tuple[str, ...]

    @classmethod
    def file_version(cls, *paths: str) -> "ProbeRequest":
        """Ask for the product version of the first existing path."""
        if not paths:
            raise ValueError("file_version probe needs at least one path")
        return cls(kind=ProbeKind.FILE_VERSION, subjects=tuple(paths))

    @classmethod
    def process_running(cls, name: str) -> "ProbeRequest":
        """Ask whether any process with this name is running."""
        return cls(kind=ProbeKind.PROCESS_RUNNING, subjects=(name,))


@dataclass(frozen=True)
class ProbeResult:
    """Answer to a ProbeRequest.

    ok is False when the target answered but the subject could not be
    inspected (e.g. the file does not exist).
    """

    ok: bool
    value: str = ""

    @property
    def as_bool(self) -> bool:
        """Interpret the value as a boolean answer."""
        return self.ok and self.value.strip().lower() == "true"


class RemoteCommand:
    """Base class for state-changing remote commands."""


@dataclass(frozen=True)
class InstallCommand(RemoteCommand):
    """Run a staged installer silently and wait for it to exit."""

    product: Product
    installer_path: str


@dataclass(frozen=True)
class EnsureDirectoryCommand(RemoteCommand):
    """Create a directory (and parents) if missing."""

    path: str


@dataclass(frozen=True)
class RemoveFileCommand(RemoteCommand):
    """Delete a file if present."""

    path: str
