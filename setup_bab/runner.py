"""
Step entrypoint: read job inputs, install bab, publish outputs.

Run as ``python -m setup_bab`` or ``setup-bab``. Command-line options take
precedence over the INPUT_VERSION / INPUT_REPO-TOKEN job inputs.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from typing import List, Optional

from setup_bab._core.actions import configure_logging, get_input, set_failed, set_output
from setup_bab._core.version import SETUP_BAB_VERSION, TOOL_NAME
from setup_bab.installer import get_bab
from setup_bab.resolver import LATEST

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="setup-bab",
        description="Install a bab release into the tool cache and add it to PATH.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "--version",
        dest="version_spec",
        default=None,
        help="Version to install: latest, an exact version, or a prefix such as 0.2.x "
        "(default: INPUT_VERSION, then latest)",
    )
    parser.add_argument(
        "--repo-token",
        default=None,
        help="GitHub token for the release listing (default: INPUT_REPO-TOKEN)",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress debug output",
    )
    parser.add_argument(
        "-V",
        "--self-version",
        action="version",
        version=f"%(prog)s {SETUP_BAB_VERSION}",
    )
    return parser


async def run(version_spec: str, repo_token: str) -> int:
    """Install bab and publish the version and path outputs."""
    try:
        logger.info(f"Setting up {TOOL_NAME} version: {version_spec}")

        result = await get_bab(version_spec, repo_token)

        set_output("version", result.version)
        set_output("path", result.path)

        logger.info(f"Successfully installed {TOOL_NAME} {result.version}")
        return 0
    except Exception as e:
        set_failed(str(e) or "An unexpected error occurred")
        return 1


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    configure_logging(logging.INFO if args.quiet else logging.DEBUG)

    version_spec = args.version_spec or get_input("version") or LATEST
    repo_token = args.repo_token or get_input("repo-token")

    return asyncio.run(run(version_spec, repo_token))
