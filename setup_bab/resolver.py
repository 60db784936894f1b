"""
Version resolution for bab releases.

Turns a user-supplied specifier into one concrete release version:

- "latest" or "": highest eligible release
- "1.2.3" / "v1.2.3": that exact release, when it is published
- "1.2" / "1.2.x" / "v1.x": highest release whose tag starts with the prefix

Usage:
    version = await resolve_version("0.2.x")
    # "0.2.10"
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, List, Optional, Sequence, Tuple

import semantic_version

from setup_bab._core.aio import run_sync
from setup_bab._core.releases import fetch_versions_async
from setup_bab._core.version import is_valid_semver, normalize_version, strip_v_prefix
from setup_bab.config import Settings
from setup_bab.errors import ReleaseNotFoundError

logger = logging.getLogger(__name__)

LATEST = "latest"

VersionFetcher = Callable[[Optional[str], Optional[Settings]], Awaitable[List[str]]]


def select_highest(versions: Sequence[str]) -> Optional[str]:
    """
    Pick the highest version by semantic-version order.

    Each candidate is compared through its normalized three-part form;
    candidates whose normalized form is not valid semver are skipped. Equal
    normalized versions keep their original order, so the one listed first
    wins.

    Args:
        versions: Release versions without a leading "v"

    Returns:
        The original (un-normalized) string of the highest candidate, or None
        if no candidate is valid
    """
    candidates: List[Tuple[semantic_version.Version, str]] = []
    for version in versions:
        normalized = normalize_version(version)
        if is_valid_semver(normalized):
            candidates.append((semantic_version.Version(normalized), version))

    if not candidates:
        return None

    # sorted() is stable with reverse=True, ties stay in listing order
    ranked = sorted(candidates, key=lambda c: c[0], reverse=True)
    return ranked[0][1]


class VersionResolver:
    """
    Resolves version specifiers against the published bab releases.

    Resolution tries named strategies in order. Each returns a concrete
    version, returns None to hand over to the next strategy, or raises
    ReleaseNotFoundError when the specifier cannot be satisfied at all.
    Every strategy that needs the release list fetches it again.
    """

    def __init__(
        self,
        token: Optional[str] = None,
        settings: Optional[Settings] = None,
        fetch_versions: Optional[VersionFetcher] = None,
    ):
        self.token = token or None
        self.settings = settings
        self._fetch_versions = fetch_versions or fetch_versions_async

    @property
    def strategies(self) -> List[Tuple[str, Callable[[str], Awaitable[Optional[str]]]]]:
        return [
            ("latest", self._resolve_latest),
            ("exact", self._resolve_exact),
            ("prefix", self._resolve_prefix),
        ]

    async def resolve(self, specifier: str) -> str:
        """
        Resolve a specifier to an exact release version.

        Raises:
            ReleaseNotFoundError: If no eligible release matches
            TransportError: If the release list cannot be fetched
        """
        for name, strategy in self.strategies:
            version = await strategy(specifier)
            if version is not None:
                logger.debug(f"Resolved '{specifier}' to version {version} ({name})")
                return version

        raise ReleaseNotFoundError(
            f"No versions found matching {specifier}", specifier=specifier
        )

    async def _versions(self) -> List[str]:
        return await self._fetch_versions(self.token, self.settings)

    async def _resolve_latest(self, specifier: str) -> Optional[str]:
        if specifier not in (LATEST, ""):
            return None

        versions = await self._versions()
        if not versions:
            raise ReleaseNotFoundError("No releases found", specifier=specifier)

        version = select_highest(versions)
        if version is None:
            raise ReleaseNotFoundError(
                "No valid semver releases found", specifier=specifier
            )
        return version

    async def _resolve_exact(self, specifier: str) -> Optional[str]:
        clean = strip_v_prefix(specifier)
        if not is_valid_semver(normalize_version(clean)):
            return None

        versions = await self._versions()
        if clean in versions:
            logger.debug(f"Using exact version {clean}")
            return clean

        logger.debug(f"No release named {clean}, falling back to prefix match")
        return None

    async def _resolve_prefix(self, specifier: str) -> Optional[str]:
        prefix = strip_v_prefix(specifier)
        if prefix.endswith(".x"):
            prefix = prefix[:-2]

        versions = await self._versions()
        matching = [v for v in versions if v.startswith(prefix)]
        if not matching:
            raise ReleaseNotFoundError(
                f"No versions found matching {specifier}", specifier=specifier
            )

        version = select_highest(matching)
        if version is None:
            raise ReleaseNotFoundError(
                f"No valid semver versions found matching {specifier}",
                specifier=specifier,
            )
        return version


async def resolve_version(
    specifier: str,
    token: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> str:
    """
    Resolve a version specifier to an exact bab release version.

    Args:
        specifier: "latest", "", an exact version or a version prefix
        token: Optional GitHub token for the release listing
        settings: Runtime settings (default: from environment)

    Returns:
        Release version without a leading "v" (e.g. "0.2.10")

    Raises:
        ReleaseNotFoundError: If no eligible release matches
        TransportError: If the release list cannot be fetched
    """
    return await VersionResolver(token=token, settings=settings).resolve(specifier)


def resolve_version_sync(
    specifier: str,
    token: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> str:
    """
    Sync wrapper for resolve_version.

    See resolve_version() for full documentation.
    """
    return run_sync(resolve_version(specifier, token, settings))
