"""Update target data models."""

from dataclasses import dataclass

from browser_updater.models.product import Product


@dataclass(frozen=True)
class UpdateTarget:
    """One host slated for an update check."""

    host: str
    product: Product
