"""
Exception types for setup-bab.

Provides typed exceptions for:
- Platform detection errors
- Release listing and download (transport) errors
- Version resolution errors
- Archive extraction errors
"""

from __future__ import annotations

from typing import Optional


class SetupBabError(Exception):
    """Base exception for all setup-bab errors."""
    pass


# =============================================================================
# Platform Errors
# =============================================================================


class UnsupportedPlatformError(SetupBabError):
    """
    Raised when the host OS or CPU architecture has no release archive.

    Raised before any network activity, so nothing needs cleaning up.
    """

    def __init__(self, kind: str, value: str):
        self.kind = kind
        self.value = value
        super().__init__(f"Unsupported {kind}: {value}")


# =============================================================================
# Transport Errors
# =============================================================================


class TransportError(SetupBabError):
    """
    Raised when GitHub cannot be reached or answers with an error.

    This includes:
    - Release listing failures
    - Archive download failures
    """

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


# =============================================================================
# Resolution Errors
# =============================================================================


class ReleaseNotFoundError(SetupBabError):
    """
    Raised when no eligible release satisfies a version specifier.

    The message tells apart "nothing matched" from "matches existed but none
    were valid semantic versions".
    """

    def __init__(self, message: str, specifier: Optional[str] = None) -> None:
        super().__init__(message)
        self.specifier = specifier


# =============================================================================
# Extraction Errors
# =============================================================================


class ExtractionError(SetupBabError):
    """Raised when a downloaded archive cannot be unpacked."""

    def __init__(self, message: str, archive_path: Optional[str] = None) -> None:
        super().__init__(message)
        self.archive_path = archive_path
