"""
Release listing for the bab GitHub repository.
"""

from __future__ import annotations

import asyncio
import logging
from typing import List, Optional

import requests

from setup_bab._core.version import SETUP_BAB_VERSION, get_releases_url, strip_v_prefix
from setup_bab.config import Settings
from setup_bab.errors import TransportError
from setup_bab.types import Release

logger = logging.getLogger(__name__)

USER_AGENT = f"setup-bab/{SETUP_BAB_VERSION}"


def _build_headers(token: Optional[str]) -> dict:
    headers = {
        "Accept": "application/vnd.github+json",
        "User-Agent": USER_AGENT,
    }
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers


def fetch_releases(
    token: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> List[Release]:
    """
    Fetch the first page of releases from the GitHub API.

    Args:
        token: Optional access token, sent as a bearer Authorization header
        settings: Runtime settings (default: from environment)

    Returns:
        All releases on the page, eligible or not

    Raises:
        TransportError: If the API cannot be reached or returns no list
    """
    settings = settings or Settings.from_env()
    url = get_releases_url(settings.api_url)
    logger.debug(f"Fetching releases from {url}")

    try:
        response = requests.get(
            url,
            headers=_build_headers(token),
            timeout=settings.request_timeout,
        )
    except requests.RequestException as e:
        raise TransportError(f"Failed to fetch releases from GitHub API: {e}") from e

    if response.status_code != 200:
        raise TransportError(
            f"Failed to fetch releases from GitHub API: HTTP {response.status_code}",
            status_code=response.status_code,
        )

    try:
        data = response.json()
    except ValueError as e:
        raise TransportError(f"Failed to fetch releases from GitHub API: {e}") from e

    if not isinstance(data, list):
        raise TransportError("Failed to fetch releases from GitHub API")

    return [Release.from_api(item) for item in data if isinstance(item, dict)]


def fetch_versions(
    token: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> List[str]:
    """
    List eligible release versions in API order.

    Drafts and prereleases are dropped and a leading "v" is removed from each
    tag ("v0.2.2" -> "0.2.2").
    """
    releases = fetch_releases(token, settings)
    versions = [strip_v_prefix(r.tag_name) for r in releases if r.eligible]
    logger.debug(f"Found {len(versions)} eligible releases out of {len(releases)}")
    return versions


async def fetch_versions_async(
    token: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> List[str]:
    """Async wrapper for fetch_versions (runs in the default executor)."""
    loop = asyncio.get_event_loop()
    return await loop.run_in_executor(None, fetch_versions, token, settings)
