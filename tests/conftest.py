"""
Pytest configuration for setup-bab tests.
"""

import io
import tarfile
import zipfile
from pathlib import Path

import pytest

from setup_bab.config import Settings
from setup_bab.types import Arch, ArchiveFormat, OSFamily, PlatformTriple

# Note: With pytest-asyncio in auto mode, no event_loop fixture needed


@pytest.fixture
def linux_x64():
    """Linux x86_64 platform triple."""
    return PlatformTriple(OSFamily.LINUX, Arch.X86_64, ArchiveFormat.TAR_GZ)


@pytest.fixture
def windows_x64():
    """Windows x86_64 platform triple."""
    return PlatformTriple(OSFamily.WINDOWS, Arch.X86_64, ArchiveFormat.ZIP)


@pytest.fixture
def settings(tmp_path):
    """Settings pointing the tool cache and temp dir into tmp_path."""
    return Settings(
        tool_cache_dir=tmp_path / "toolcache",
        temp_dir=tmp_path / "temp",
        request_timeout=5.0,
    )


@pytest.fixture
def clean_env(monkeypatch):
    """Remove runner environment variables that change behavior."""
    for name in (
        "GITHUB_API_URL",
        "SETUP_BAB_API_URL",
        "GITHUB_SERVER_URL",
        "SETUP_BAB_SERVER_URL",
        "RUNNER_TOOL_CACHE",
        "RUNNER_TEMP",
        "SETUP_BAB_TIMEOUT",
        "GITHUB_OUTPUT",
        "GITHUB_PATH",
        "INPUT_VERSION",
        "INPUT_REPO-TOKEN",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def make_tar_gz(files: dict) -> bytes:
    """Build a .tar.gz archive in memory from {name: bytes}."""
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as tar:
        for name, content in files.items():
            info = tarfile.TarInfo(name)
            info.size = len(content)
            info.mode = 0o755
            tar.addfile(info, io.BytesIO(content))
    return buffer.getvalue()


def make_zip(files: dict) -> bytes:
    """Build a .zip archive in memory from {name: bytes}."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        for name, content in files.items():
            zf.writestr(name, content)
    return buffer.getvalue()


@pytest.fixture
def bab_tarball():
    """A release tarball laid out like the real bab archives."""
    return make_tar_gz({
        "bab": b"#!/bin/sh\necho bab\n",
        "LICENSE": b"MIT",
        "README.md": b"# bab",
    })


@pytest.fixture
def bab_zip():
    """A Windows release zip."""
    return make_zip({"bab.exe": b"MZ fake", "LICENSE": b"MIT"})


def write_bytes(path: Path, content: bytes) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content)
    return path
