"""
Runtime configuration for setup-bab.

Settings are read from the environment a CI runner provides. Every value has
a default so the package also works on a developer machine. The runner's
GITHUB_API_URL and GITHUB_SERVER_URL are not used: bab is always published on
github.com, even when the job runs on a GitHub Enterprise Server runner.

Environment Variables:
    SETUP_BAB_API_URL: GitHub API base URL (default: https://api.github.com)
    SETUP_BAB_SERVER_URL: GitHub server base URL (default: https://github.com)
    RUNNER_TOOL_CACHE: Root of the tool cache (default: user cache dir)
    RUNNER_TEMP: Scratch directory for downloads (default: system temp)
    SETUP_BAB_TIMEOUT: HTTP timeout in seconds (default: 60)
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from platformdirs import user_cache_dir

logger = logging.getLogger(__name__)

GITHUB_API_URL = "https://api.github.com"
GITHUB_SERVER_URL = "https://github.com"
DEFAULT_REQUEST_TIMEOUT = 60.0


def default_tool_cache_dir() -> Path:
    """Tool cache location used outside of a CI runner."""
    return Path(user_cache_dir("setup-bab", "bab-sh")) / "tool-cache"


@dataclass
class Settings:
    """
    Configuration for release listing, downloads and caching.

    Attributes:
        api_url: GitHub API base URL used for release listing
        server_url: GitHub server base URL used for asset downloads
        tool_cache_dir: Root directory of the tool cache
        temp_dir: Directory for downloaded archives and extraction roots
        request_timeout: Per-request HTTP timeout in seconds
    """
    api_url: str = GITHUB_API_URL
    server_url: str = GITHUB_SERVER_URL
    tool_cache_dir: Optional[Path] = None
    temp_dir: Optional[Path] = None
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT

    def __post_init__(self) -> None:
        if self.tool_cache_dir is None:
            self.tool_cache_dir = default_tool_cache_dir()
        else:
            self.tool_cache_dir = Path(self.tool_cache_dir)
        if self.temp_dir is not None:
            self.temp_dir = Path(self.temp_dir)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from environment variables."""
        env = os.environ if environ is None else environ

        timeout = DEFAULT_REQUEST_TIMEOUT
        raw_timeout = env.get("SETUP_BAB_TIMEOUT")
        if raw_timeout:
            try:
                timeout = float(raw_timeout)
            except ValueError:
                logger.warning(
                    f"Ignoring invalid SETUP_BAB_TIMEOUT={raw_timeout!r}, "
                    f"using {DEFAULT_REQUEST_TIMEOUT}s"
                )

        cache_dir = env.get("RUNNER_TOOL_CACHE")
        temp_dir = env.get("RUNNER_TEMP")

        return cls(
            api_url=env.get("SETUP_BAB_API_URL") or GITHUB_API_URL,
            server_url=env.get("SETUP_BAB_SERVER_URL") or GITHUB_SERVER_URL,
            tool_cache_dir=Path(cache_dir) if cache_dir else None,
            temp_dir=Path(temp_dir) if temp_dir else None,
            request_timeout=timeout,
        )
