"""
Install machinery for setup-bab.

This module handles:
- Release listing from the GitHub API
- Platform detection and download URL construction
- Archive download, extraction and tool caching
"""

from setup_bab._core.version import (
    SETUP_BAB_VERSION,
    TOOL_NAME,
    normalize_version,
    is_valid_semver,
    get_download_url,
    get_releases_url,
)
from setup_bab._core.releases import (
    fetch_releases,
    fetch_versions,
)
from setup_bab._core.cache import ToolCache
from setup_bab._core.lifecycle import (
    get_platform_triple,
    install,
    install_sync,
)

__all__ = [
    # Version
    "SETUP_BAB_VERSION",
    "TOOL_NAME",
    "normalize_version",
    "is_valid_semver",
    "get_download_url",
    "get_releases_url",
    # Releases
    "fetch_releases",
    "fetch_versions",
    # Cache
    "ToolCache",
    # Lifecycle
    "get_platform_triple",
    "install",
    "install_sync",
]
