"""Installer download and version probing.

Every fetch downloads into a fresh directory under the download directory,
so batches running side by side never share, overwrite or delete each
other's installer. The version is then probed locally:

- msi (Chrome): the summary information stream of the MSI carries the
  browser version in its comments.
- sfx (Firefox): the installer is a 7-Zip self-extracting archive; the
  bundled browser executable is extracted to a scratch directory and its
  version resource read. The scratch directory never outlives the probe.
"""

import asyncio
import logging
import re
import shutil
import tempfile
from collections.abc import Callable
from pathlib import Path

import httpx
import olefile
import pefile

from browser_updater.models import PRODUCTS, InstallArtifact, Product, ProductProfile
from browser_updater.services.version import Version, parse_version

logger = logging.getLogger(__name__)

_VERSION_IN_TEXT = re.compile(r"\b(\d+\.\d+\.\d+(?:\.\d+)?)\b")
_PE_VERSION_KEYS = (b"ProductVersion", b"FileVersion")


class FetchError(Exception):
    """Installer could not be downloaded or its version determined."""

    def __init__(self, product: Product, reason: str):
        """Initialize fetch error.

        Args:
            product: Product whose installer was being fetched
            reason: Human readable cause
        """
        self.product = product
        self.reason = reason
        super().__init__(f"Cannot fetch {product.value} installer: {reason}")


def _as_text(value: bytes | str | None) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value


def read_msi_version(path: Path) -> Version | None:
    """Find the product version recorded in an MSI's summary information."""
    if not olefile.isOleFile(str(path)):
        return None
    ole = olefile.OleFileIO(str(path))
    try:
        meta = ole.get_metadata()
    finally:
        ole.close()

    for field in (meta.comments, meta.subject, meta.title, meta.keywords):
        match = _VERSION_IN_TEXT.search(_as_text(field))
        if match:
            return parse_version(match.group(1))
    return None


def read_pe_version(path: Path) -> Version | None:
    """Read the version resource of a Windows executable."""
    pe = pefile.PE(str(path), fast_load=True)
    try:
        pe.parse_data_directories(
            directories=[pefile.DIRECTORY_ENTRY["IMAGE_DIRECTORY_ENTRY_RESOURCE"]]
        )
        for file_info in getattr(pe, "FileInfo", None) or []:
            for entry in file_info:
                if getattr(entry, "Key", b"") != b"StringFileInfo":
                    continue
                for table in entry.StringTable:
                    for key in _PE_VERSION_KEYS:
                        version = parse_version(_as_text(table.entries.get(key)))
                        if version is not None:
                            return version

        fixed_infos = getattr(pe, "VS_FIXEDFILEINFO", None)
        if fixed_infos:
            fixed = fixed_infos[0]
            return Version(
                f"{fixed.ProductVersionMS >> 16}.{fixed.ProductVersionMS & 0xFFFF}."
                f"{fixed.ProductVersionLS >> 16}.{fixed.ProductVersionLS & 0xFFFF}"
            )
    finally:
        pe.close()
    return None


class ArtifactFetcher:
    """Downloads the latest installer for a product and probes its version."""

    def __init__(
        self,
        download_dir: Path,
        timeout: float = 300.0,
        seven_zip: str = "7z",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize fetcher.

        Args:
            download_dir: Parent of the per-fetch download directories
            timeout: HTTP timeout in seconds
            seven_zip: 7-Zip executable used to open self-extracting installers
            transport: Optional httpx transport (tests)
        """
        self.download_dir = Path(download_dir)
        self.timeout = timeout
        self.seven_zip = seven_zip
        self._transport = transport

    async def fetch(self, product: Product) -> InstallArtifact:
        """Download the latest installer and determine its version.

        Raises:
            FetchError: If download or version probing fails
        """
        profile = PRODUCTS[product]
        try:
            self.download_dir.mkdir(parents=True, exist_ok=True)
            workdir = Path(
                tempfile.mkdtemp(prefix=f"{product.value}_", dir=self.download_dir)
            )
        except OSError as e:
            raise FetchError(
                product, f"cannot create a directory in {self.download_dir}: {e}"
            ) from e
        path = workdir / profile.artifact_name

        try:
            await self._download(profile, path)
            version = await self._probe_version(profile, path)
        except BaseException:
            shutil.rmtree(workdir, ignore_errors=True)
            raise

        logger.info(
            "Fetched %s installer %s (%s)",
            profile.display_name,
            version,
            path,
        )
        return InstallArtifact(
            product=product,
            download_uri=profile.download_uri,
            local_path=path,
            version=version,
        )

    def cleanup(self, artifact: InstallArtifact) -> None:
        """Remove an artifact along with the directory it was fetched into."""
        workdir = artifact.local_path.parent
        owned = workdir.resolve().parent == self.download_dir.resolve()
        target = workdir if owned else artifact.local_path
        try:
            if target.is_dir():
                shutil.rmtree(target)
            else:
                target.unlink(missing_ok=True)
        except OSError as e:
            logger.warning("Cannot remove %s: %s", target, e)
            return
        logger.debug("Removed local artifact %s", target)

    async def _download(self, profile: ProductProfile, path: Path) -> None:
        logger.info("Downloading %s from %s", profile.display_name, profile.download_uri)
        try:
            async with httpx.AsyncClient(
                follow_redirects=True,
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                async with client.stream("GET", profile.download_uri) as response:
                    response.raise_for_status()
                    with path.open("wb") as fh:
                        async for chunk in response.aiter_bytes():
                            fh.write(chunk)
            size = path.stat().st_size
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise FetchError(profile.product, f"download failed: {e}") from e
        except OSError as e:
            raise FetchError(profile.product, f"cannot write {path}: {e}") from e

        if size == 0:
            raise FetchError(profile.product, "downloaded installer is empty")
        logger.debug("Downloaded %d bytes to %s", size, path)

    async def _probe_version(self, profile: ProductProfile, path: Path) -> Version:
        if profile.installer_kind == "msi":
            version = await self._read(profile, read_msi_version, path)
        elif profile.installer_kind == "sfx":
            version = await self._probe_sfx(profile, path)
        else:
            raise FetchError(
                profile.product, f"unsupported installer kind {profile.installer_kind}"
            )

        if version is None:
            raise FetchError(profile.product, f"no version found in {path.name}")
        return version

    async def _read(
        self,
        profile: ProductProfile,
        reader: Callable[[Path], Version | None],
        path: Path,
    ) -> Version | None:
        """Run a blocking metadata reader off the event loop."""
        try:
            return await asyncio.to_thread(reader, path)
        except (OSError, pefile.PEFormatError) as e:
            raise FetchError(profile.product, f"cannot read {path.name}: {e}") from e

    async def _probe_sfx(self, profile: ProductProfile, path: Path) -> Version | None:
        """Extract the bundled executable and read its version."""
        if not profile.bundled_executable:
            raise FetchError(profile.product, "no bundled executable configured")

        try:
            scratch = Path(tempfile.mkdtemp(prefix="extract_", dir=path.parent))
        except OSError as e:
            raise FetchError(
                profile.product, f"cannot create extraction directory: {e}"
            ) from e
        try:
            try:
                proc = await asyncio.create_subprocess_exec(
                    self.seven_zip,
                    "x",
                    "-y",
                    f"-o{scratch}",
                    str(path),
                    profile.bundled_executable,
                    stdout=asyncio.subprocess.PIPE,
                    stderr=asyncio.subprocess.PIPE,
                )
                _, stderr = await proc.communicate()
            except OSError as e:
                raise FetchError(
                    profile.product, f"cannot run {self.seven_zip}: {e}"
                ) from e

            if proc.returncode != 0:
                raise FetchError(
                    profile.product,
                    f"extraction failed ({proc.returncode}): "
                    f"{_as_text(stderr).strip()}",
                )

            exe = scratch / profile.bundled_executable
            if not exe.is_file():
                raise FetchError(
                    profile.product,
                    f"{profile.bundled_executable} not found in {path.name}",
                )
            return await self._read(profile, read_pe_version, exe)
        finally:
            shutil.rmtree(scratch, ignore_errors=True)
            logger.debug("Removed extraction directory %s", scratch)
