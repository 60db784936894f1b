"""
Top-level install flow: resolve a specifier, install it, expose it on PATH.

Usage:
    from setup_bab import get_bab

    result = await get_bab("0.2.x")
    print(result.version, result.path)
    # v0.2.10 /opt/hostedtoolcache/bab/0.2.10/x86_64/bin
"""

from __future__ import annotations

import logging
from typing import Optional

from setup_bab._core.actions import add_path
from setup_bab._core.aio import run_sync
from setup_bab._core.lifecycle import BIN_DIR, get_platform_triple, install
from setup_bab._core.version import TOOL_NAME
from setup_bab.config import Settings
from setup_bab.resolver import resolve_version
from setup_bab.types import InstallResult, PlatformTriple

logger = logging.getLogger(__name__)


async def get_bab(
    version_spec: str,
    repo_token: Optional[str] = None,
    settings: Optional[Settings] = None,
    platform: Optional[PlatformTriple] = None,
) -> InstallResult:
    """
    Install the bab release matching a version specifier.

    The host platform is checked first, so an unsupported host fails before
    any request is made. The resulting bin/ directory is prepended to PATH.

    Args:
        version_spec: "latest", "", an exact version or a version prefix
        repo_token: Optional GitHub token for the release listing
        settings: Runtime settings (default: from environment)
        platform: Host platform triple (default: detected)

    Returns:
        InstallResult with the "v"-prefixed version and the bin/ path

    Raises:
        SetupBabError: Any resolution, download or extraction failure
    """
    platform = platform or get_platform_triple()
    settings = settings or Settings.from_env()

    version = await resolve_version(version_spec, repo_token, settings)
    logger.info(f"Installing {TOOL_NAME} v{version}")

    tool_path = await install(version, platform=platform, settings=settings)

    bin_path = tool_path.absolute() / BIN_DIR
    add_path(str(bin_path))
    logger.info(f"Added {bin_path} to PATH")

    return InstallResult(version=f"v{version}", path=str(bin_path))


def get_bab_sync(
    version_spec: str,
    repo_token: Optional[str] = None,
    settings: Optional[Settings] = None,
    platform: Optional[PlatformTriple] = None,
) -> InstallResult:
    """
    Sync wrapper for get_bab.

    See get_bab() for full documentation.
    """
    return run_sync(get_bab(version_spec, repo_token, settings, platform))
