"""
Type definitions for setup-bab.

Defines enums and dataclasses shared by the resolver and the install pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict


class OSFamily(str, Enum):
    """Operating system names as they appear in release archive names."""
    LINUX = "Linux"
    MACOS = "macOS"
    WINDOWS = "Windows"


class Arch(str, Enum):
    """CPU architecture names as they appear in release archive names."""
    X86_64 = "x86_64"
    ARM64 = "arm64"
    ARMV7 = "armv7"


class ArchiveFormat(str, Enum):
    """Archive file extension used for a platform's release asset."""
    ZIP = "zip"
    TAR_GZ = "tar.gz"


@dataclass(frozen=True)
class PlatformTriple:
    """
    The (OS family, architecture, archive format) of the current host.

    Computed once per install and passed explicitly to URL building and
    binary naming.
    """
    os_family: OSFamily
    arch: Arch
    archive_format: ArchiveFormat

    @property
    def extension(self) -> str:
        return self.archive_format.value

    @property
    def is_windows(self) -> bool:
        return self.os_family == OSFamily.WINDOWS


@dataclass(frozen=True)
class Release:
    """A published release as returned by the GitHub releases API."""
    tag_name: str
    prerelease: bool = False
    draft: bool = False

    @property
    def eligible(self) -> bool:
        """Only full releases (neither draft nor prerelease) may be installed."""
        return not self.draft and not self.prerelease

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Release":
        return cls(
            tag_name=str(data.get("tag_name", "")),
            prerelease=bool(data.get("prerelease", False)),
            draft=bool(data.get("draft", False)),
        )


@dataclass(frozen=True)
class InstallResult:
    """
    Outcome of a successful install.

    Attributes:
        version: Resolved version, prefixed with "v" (e.g. "v0.2.10")
        path: Absolute path of the directory holding the bab executable
    """
    version: str
    path: str
