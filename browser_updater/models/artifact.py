"""Installer artifact data model."""

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from browser_updater.models.product import Product

if TYPE_CHECKING:
    from browser_updater.services.version import Version


@dataclass(frozen=True)
class InstallArtifact:
    """Downloaded installer shared read-only by every worker in a batch."""

    product: Product
    download_uri: str
    local_path: Path
    version: "Version"

    @property
    def file_name(self) -> str:
        """Installer file name, reused for the remote staging copy."""
        return self.local_path.name
