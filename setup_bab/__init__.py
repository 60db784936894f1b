"""
setup-bab: Install the bab task runner in CI jobs.

Resolves a version specifier against the bab GitHub releases, downloads the
archive for the current platform, and keeps it in a tool cache so identical
jobs do not download it again.

Installation:
    pip install setup-bab

Quickstart:
    from setup_bab import get_bab

    result = await get_bab("0.2.x")
    print(f"Installed {result.version} into {result.path}")

Command line (reads INPUT_VERSION / INPUT_REPO-TOKEN when no options given):
    python -m setup_bab --version 0.2.x
"""

from setup_bab.types import (
    OSFamily,
    Arch,
    ArchiveFormat,
    PlatformTriple,
    Release,
    InstallResult,
)
from setup_bab.errors import (
    SetupBabError,
    UnsupportedPlatformError,
    TransportError,
    ReleaseNotFoundError,
    ExtractionError,
)
from setup_bab.config import Settings
from setup_bab.resolver import (
    VersionResolver,
    resolve_version,
    resolve_version_sync,
    select_highest,
)
from setup_bab.installer import (
    get_bab,
    get_bab_sync,
)
from setup_bab._core.version import (
    SETUP_BAB_VERSION,
    normalize_version,
)
from setup_bab._core.lifecycle import (
    get_platform_triple,
    install,
    install_sync,
)
from setup_bab._core.cache import ToolCache

__version__ = SETUP_BAB_VERSION

__all__ = [
    # Version
    "__version__",
    "SETUP_BAB_VERSION",
    # Types
    "OSFamily",
    "Arch",
    "ArchiveFormat",
    "PlatformTriple",
    "Release",
    "InstallResult",
    # Errors
    "SetupBabError",
    "UnsupportedPlatformError",
    "TransportError",
    "ReleaseNotFoundError",
    "ExtractionError",
    # Config
    "Settings",
    # Resolution
    "VersionResolver",
    "resolve_version",
    "resolve_version_sync",
    "select_highest",
    "normalize_version",
    # Install
    "get_bab",
    "get_bab_sync",
    "get_platform_triple",
    "install",
    "install_sync",
    "ToolCache",
]
