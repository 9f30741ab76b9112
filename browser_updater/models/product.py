"""Browser product definitions.

Each supported browser is described by a ProductProfile holding the vendor
download endpoint, the installer format and the paths and process name used
to inspect an installation on a Windows target.
"""

from dataclasses import dataclass
from enum import Enum


class Product(Enum):
    """Browser that can be updated."""

    CHROME = "chrome"
    FIREFOX = "firefox"

    @classmethod
    def parse(cls, value: str) -> "Product":
        """Look up a product by name, case-insensitively.

        Raises:
            ValueError: If the name is not a supported product
        """
        try:
            return cls(value.strip().lower())
        except ValueError:
            choices = ", ".join(p.value for p in cls)
            raise ValueError(
                f"Unknown product '{value}'. Expected one of: {choices}"
            ) from None


@dataclass(frozen=True)
class ProductProfile:
    """Static facts about how a product is fetched and installed."""

    product: Product
    display_name: str
    download_uri: str
    artifact_name: str
    installer_kind: str  # "msi" or "sfx"
    install_paths: tuple[str, ...]
    process_name: str
    silent_args: tuple[str, ...]
    bundled_executable: str | None = None


PRODUCTS: dict[Product, ProductProfile] = {
    Product.CHROME: ProductProfile(
        product=Product.CHROME,
        display_name="Google Chrome",
        download_uri=(
            "https://dl.google.com/chrome/install/"
            "googlechromestandaloneenterprise64.msi"
        ),
        artifact_name="googlechromestandaloneenterprise64.msi",
        installer_kind="msi",
        install_paths=(
            r"C:\Program Files\Google\Chrome\Application\chrome.exe",
            r"C:\Program Files (x86)\Google\Chrome\Application\chrome.exe",
        ),
        process_name="chrome",
        silent_args=("/qn", "/norestart"),
    ),
    Product.FIREFOX: ProductProfile(
        product=Product.FIREFOX,
        display_name="Mozilla Firefox",
        download_uri=(
            "https://download.mozilla.org/"
            "?product=firefox-latest&os=win64&lang=en-US"
        ),
        artifact_name="FirefoxSetup.exe",
        installer_kind="sfx",
        install_paths=(
            r"C:\Program Files\Mozilla Firefox\firefox.exe",
            r"C:\Program Files (x86)\Mozilla Firefox\firefox.exe",
        ),
        process_name="firefox",
        silent_args=("/S",),
        bundled_executable="core/firefox.exe",
    ),
}
