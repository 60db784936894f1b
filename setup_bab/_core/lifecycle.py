"""
Install lifecycle for the bab binary.

Handles:
- Platform detection
- Archive download from GitHub releases
- Archive extraction and binary placement
- Tool cache lookup and registration
"""

from __future__ import annotations

import asyncio
import logging
import platform as host_platform
import shutil
import sys
import tarfile
import tempfile
import zipfile
from functools import partial
from pathlib import Path
from typing import Any, Callable, Optional, TypeVar

import requests

from setup_bab._core.aio import run_sync
from setup_bab._core.cache import ToolCache
from setup_bab._core.releases import USER_AGENT
from setup_bab._core.version import TOOL_NAME, get_binary_name, get_download_url
from setup_bab.config import Settings
from setup_bab.errors import ExtractionError, TransportError, UnsupportedPlatformError
from setup_bab.types import Arch, ArchiveFormat, OSFamily, PlatformTriple

logger = logging.getLogger(__name__)

T = TypeVar("T")

BIN_DIR = "bin"

# Keys are sys.platform values (plus platform.system() for Windows)
OS_FAMILIES = {
    "linux": OSFamily.LINUX,
    "darwin": OSFamily.MACOS,
    "win32": OSFamily.WINDOWS,
    "windows": OSFamily.WINDOWS,
}

# Keys cover both Node-style names and platform.machine() values
ARCHITECTURES = {
    "x64": Arch.X86_64,
    "x86_64": Arch.X86_64,
    "amd64": Arch.X86_64,
    "arm64": Arch.ARM64,
    "aarch64": Arch.ARM64,
    "arm": Arch.ARMV7,
    "armv7": Arch.ARMV7,
    "armv7l": Arch.ARMV7,
}


def get_platform_triple(
    system: Optional[str] = None,
    machine: Optional[str] = None,
) -> PlatformTriple:
    """
    Map an OS and CPU architecture to the release asset naming scheme.

    Args:
        system: OS identifier (default: sys.platform)
        machine: CPU architecture (default: platform.machine())

    Returns:
        PlatformTriple for the host

    Raises:
        UnsupportedPlatformError: If the OS or architecture has no release asset
    """
    system = (sys.platform if system is None else system).lower()
    machine = (host_platform.machine() if machine is None else machine).lower()

    os_family = OS_FAMILIES.get(system)
    if os_family is None:
        raise UnsupportedPlatformError("platform", system)

    arch = ARCHITECTURES.get(machine)
    if arch is None:
        raise UnsupportedPlatformError("architecture", machine)

    archive_format = (
        ArchiveFormat.ZIP if os_family == OSFamily.WINDOWS else ArchiveFormat.TAR_GZ
    )
    return PlatformTriple(os_family, arch, archive_format)


def _make_temp_dir(settings: Settings) -> Path:
    if settings.temp_dir is not None:
        settings.temp_dir.mkdir(parents=True, exist_ok=True)
    return Path(tempfile.mkdtemp(prefix="setup-bab-", dir=settings.temp_dir))


def download_archive(url: str, dest_dir: Path, timeout: float = 60.0) -> Path:
    """
    Download a release archive into a directory.

    No Authorization header is sent; release assets are public.

    Args:
        url: Asset download URL
        dest_dir: Directory to write the archive into
        timeout: HTTP timeout in seconds

    Returns:
        Path to the downloaded archive

    Raises:
        requests.RequestException: If the download fails
        OSError: If the archive cannot be written
    """
    target_path = dest_dir / url.rsplit("/", 1)[-1]

    try:
        response = requests.get(
            url,
            stream=True,
            timeout=timeout,
            headers={"User-Agent": USER_AGENT},
        )
        try:
            response.raise_for_status()

            with open(target_path, "wb") as f:
                for chunk in response.iter_content(chunk_size=8192):
                    f.write(chunk)
        finally:
            response.close()
    except (requests.RequestException, OSError):
        if target_path.exists():
            target_path.unlink()
        raise

    logger.debug(f"Downloaded {url} to {target_path}")
    return target_path


def extract_tar(archive_path: Path, dest_dir: Path) -> Path:
    """Extract a gzip-compressed tarball into dest_dir."""
    try:
        with tarfile.open(archive_path, mode="r:gz") as tar:
            if hasattr(tarfile, "data_filter"):
                tar.extractall(path=dest_dir, filter="data")
            else:
                tar.extractall(path=dest_dir)
    except (tarfile.TarError, OSError) as e:
        raise ExtractionError(
            f"Failed to extract {archive_path}: {e}", archive_path=str(archive_path)
        ) from e
    return dest_dir


def extract_zip(archive_path: Path, dest_dir: Path) -> Path:
    """Extract a zip archive into dest_dir."""
    try:
        with zipfile.ZipFile(archive_path) as zip_file:
            zip_file.extractall(path=dest_dir)
    except (zipfile.BadZipFile, OSError) as e:
        raise ExtractionError(
            f"Failed to extract {archive_path}: {e}", archive_path=str(archive_path)
        ) from e
    return dest_dir


def extract_archive(archive_path: Path, dest_dir: Path, platform: PlatformTriple) -> Path:
    """Extract with the method matching the platform's archive format."""
    if platform.archive_format == ArchiveFormat.ZIP:
        return extract_zip(archive_path, dest_dir)
    return extract_tar(archive_path, dest_dir)


def relocate_binary(root: Path, platform: PlatformTriple) -> Path:
    """
    Move the executable from the archive root into root/bin.

    A failed move is only logged: some archive layouts already ship the
    binary under bin/, and a binary that is really missing fails later when
    it is executed.

    Returns:
        The bin/ directory
    """
    bin_dir = root / BIN_DIR
    bin_dir.mkdir(parents=True, exist_ok=True)

    binary_name = get_binary_name(platform)
    source = root / binary_name
    dest = bin_dir / binary_name

    try:
        shutil.move(str(source), str(dest))
    except OSError as e:
        logger.debug(f"Could not move binary ({e}), checking if it exists at {dest}")

    return bin_dir


async def _run_blocking(func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    loop = asyncio.get_event_loop()
    return await loop.run_in_executor(None, partial(func, *args, **kwargs))


async def download_release(
    version: str,
    platform: PlatformTriple,
    settings: Settings,
    cache: ToolCache,
) -> Path:
    """
    Download, extract and cache one bab release.

    Args:
        version: Exact bab version
        platform: Host platform triple
        settings: Runtime settings
        cache: Tool cache to register the install with

    Returns:
        Canonical cached directory

    Raises:
        TransportError: If the download fails
        ExtractionError: If the archive cannot be extracted
    """
    url = get_download_url(version, platform, settings.server_url)
    logger.info(f"Downloading {TOOL_NAME} from {url}")

    download_dir: Optional[Path] = None
    extract_dir: Optional[Path] = None
    try:
        try:
            download_dir = await _run_blocking(_make_temp_dir, settings)
            archive_path = await _run_blocking(
                download_archive, url, download_dir, settings.request_timeout
            )
        except (requests.RequestException, OSError) as e:
            response = getattr(e, "response", None)
            status_code = response.status_code if response is not None else None
            raise TransportError(
                f"Failed to download {TOOL_NAME} {version}: {e}",
                status_code=status_code,
            ) from e

        extract_dir = await _run_blocking(_make_temp_dir, settings)
        root = await _run_blocking(extract_archive, archive_path, extract_dir, platform)
        await _run_blocking(relocate_binary, root, platform)

        cached_path = await _run_blocking(
            cache.save, root, TOOL_NAME, version, platform.arch.value
        )
        logger.debug(f"Cached {TOOL_NAME} at {cached_path}")
        return cached_path
    finally:
        for temp_dir in (download_dir, extract_dir):
            if temp_dir is not None:
                shutil.rmtree(temp_dir, ignore_errors=True)


async def install(
    version: str,
    platform: Optional[PlatformTriple] = None,
    settings: Optional[Settings] = None,
    cache: Optional[ToolCache] = None,
) -> Path:
    """
    Ensure an exact bab version is installed in the tool cache.

    A cache hit returns immediately without any network activity.

    Args:
        version: Exact bab version (never "latest" or a prefix)
        platform: Host platform triple (default: detected)
        settings: Runtime settings (default: from environment)
        cache: Tool cache (default: settings.tool_cache_dir)

    Returns:
        Path to the cached install directory (contains bin/)

    Raises:
        UnsupportedPlatformError: If the host platform is not supported
        TransportError: If the download fails
        ExtractionError: If the archive cannot be extracted
    """
    platform = platform or get_platform_triple()
    settings = settings or Settings.from_env()
    cache = cache or ToolCache(settings.tool_cache_dir)

    tool_path = cache.find(TOOL_NAME, version, platform.arch.value)
    if tool_path is not None:
        logger.info(f"Found {TOOL_NAME} v{version} in tool cache")
        return tool_path

    return await download_release(version, platform, settings, cache)


def install_sync(
    version: str,
    platform: Optional[PlatformTriple] = None,
    settings: Optional[Settings] = None,
    cache: Optional[ToolCache] = None,
) -> Path:
    """
    Sync wrapper for install.

    See install() for full documentation.
    """
    return run_sync(install(version, platform, settings, cache))
