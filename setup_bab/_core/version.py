"""
Version constants and helpers for setup-bab.

- SETUP_BAB_VERSION: Version of this package
- TOOL_NAME / REPO_OWNER / REPO_NAME: Where bab releases are published
- normalize_version / is_valid_semver: Comparison lens over release tags
"""

from __future__ import annotations

import semantic_version

from setup_bab.config import GITHUB_API_URL, GITHUB_SERVER_URL
from setup_bab.types import PlatformTriple

# setup-bab version (user-facing, independent semver)
SETUP_BAB_VERSION = "0.1.0"

# GitHub repository for binary downloads
TOOL_NAME = "bab"
REPO_OWNER = "bab-sh"
REPO_NAME = "bab"

# The releases API caps a page at 100 entries; only the first page is read
RELEASES_PER_PAGE = 100


def strip_v_prefix(version: str) -> str:
    """Drop a single leading "v" ("v1.2.3" -> "1.2.3")."""
    return version[1:] if version.startswith("v") else version


def normalize_version(version: str) -> str:
    """
    Coerce a version string to exactly three dot-separated components.

    Missing trailing components are padded with "0" and extra ones are
    dropped, so "1" -> "1.0.0", "1.2" -> "1.2.0" and "1.2.3.4" -> "1.2.3".
    The result is only used for ordering and validity checks.

    Args:
        version: Version string without a leading "v"

    Returns:
        Three-component version string (not necessarily valid semver)
    """
    parts = version.split(".")
    while len(parts) < 3:
        parts.append("0")
    return ".".join(parts[:3])


def is_valid_semver(version: str) -> bool:
    """Check whether a string is a strictly valid semantic version."""
    return semantic_version.validate(version)


def get_releases_url(api_url: str = GITHUB_API_URL) -> str:
    """
    Get the releases listing URL for the bab repository.

    Args:
        api_url: GitHub API base URL (GitHub Enterprise installs differ)

    Returns:
        Releases API URL including the page size
    """
    return (
        f"{api_url.rstrip('/')}/repos/{REPO_OWNER}/{REPO_NAME}"
        f"/releases?per_page={RELEASES_PER_PAGE}"
    )


def get_archive_name(version: str, platform: PlatformTriple) -> str:
    """Release asset name, e.g. "bab_0.2.2_Linux_x86_64.tar.gz"."""
    return (
        f"{TOOL_NAME}_{version}_{platform.os_family.value}"
        f"_{platform.arch.value}.{platform.extension}"
    )


def get_download_url(
    version: str,
    platform: PlatformTriple,
    server_url: str = GITHUB_SERVER_URL,
) -> str:
    """
    Get the download URL for a specific bab version and platform.

    Args:
        version: Exact bab version (e.g., "0.2.2")
        platform: Host platform triple
        server_url: GitHub server base URL

    Returns:
        GitHub release download URL
    """
    filename = get_archive_name(version, platform)
    return (
        f"{server_url.rstrip('/')}/{REPO_OWNER}/{REPO_NAME}"
        f"/releases/download/v{version}/{filename}"
    )


def get_binary_name(platform: PlatformTriple) -> str:
    """Executable file name inside the archive ("bab" or "bab.exe")."""
    return f"{TOOL_NAME}.exe" if platform.is_windows else TOOL_NAME
