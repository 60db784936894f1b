"""
On-disk tool cache.

Layout (compatible with the hosted runner tool cache):

    <root>/<tool>/<version>/<arch>/          installed files
    <root>/<tool>/<version>/<arch>.complete  marker written last
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Optional, Union

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class ToolCache:
    """
    Find and register installed tool directories.

    An entry only counts as cached once its marker file exists, so a copy
    interrupted half-way is never returned by find().
    """

    def __init__(self, root: PathLike):
        self.root = Path(root)

    def _entry_dir(self, tool: str, version: str, arch: str) -> Path:
        return self.root / tool / version / arch

    def _marker(self, tool: str, version: str, arch: str) -> Path:
        return self.root / tool / version / f"{arch}.complete"

    def find(self, tool: str, version: str, arch: str) -> Optional[Path]:
        """
        Look up an installed tool version.

        Args:
            tool: Tool name (e.g. "bab")
            version: Exact version (e.g. "0.2.10")
            arch: Architecture the entry was installed for

        Returns:
            Path to the cached directory, or None on a cache miss
        """
        entry = self._entry_dir(tool, version, arch)
        if entry.is_dir() and self._marker(tool, version, arch).exists():
            logger.debug(f"Found {tool} {version} ({arch}) in tool cache at {entry}")
            return entry
        logger.debug(f"{tool} {version} ({arch}) not found in tool cache")
        return None

    def save(self, source_dir: PathLike, tool: str, version: str, arch: str) -> Path:
        """
        Copy a directory into the cache and mark it complete.

        An existing entry for the same key is replaced.

        Returns:
            Canonical path of the cached directory
        """
        source = Path(source_dir)
        if not source.is_dir():
            raise NotADirectoryError(f"Not a directory: {source}")

        entry = self._entry_dir(tool, version, arch)
        marker = self._marker(tool, version, arch)

        logger.debug(f"Caching {tool} {version} ({arch}) from {source}")
        if marker.exists():
            marker.unlink()
        if entry.exists():
            shutil.rmtree(entry)
        entry.parent.mkdir(parents=True, exist_ok=True)
        shutil.copytree(source, entry)
        marker.write_text("")

        return entry
