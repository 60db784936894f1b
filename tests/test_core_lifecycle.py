"""Tests for setup_bab._core.lifecycle module."""

from unittest.mock import MagicMock, patch

import pytest
import requests

from conftest import make_tar_gz, write_bytes
from setup_bab._core.cache import ToolCache
from setup_bab._core.lifecycle import (
    download_archive,
    extract_archive,
    extract_tar,
    extract_zip,
    get_platform_triple,
    install,
    install_sync,
    relocate_binary,
)
from setup_bab.errors import ExtractionError, TransportError, UnsupportedPlatformError
from setup_bab.types import Arch, ArchiveFormat, OSFamily, PlatformTriple


def _download_response(content: bytes):
    response = MagicMock()
    response.status_code = 200
    response.iter_content = MagicMock(return_value=[content[:10], content[10:]])
    response.raise_for_status = MagicMock()
    return response


class TestGetPlatformTriple:
    """Tests for get_platform_triple function."""

    @pytest.mark.parametrize(
        "system,os_family",
        [("linux", OSFamily.LINUX), ("darwin", OSFamily.MACOS), ("win32", OSFamily.WINDOWS)],
    )
    @pytest.mark.parametrize(
        "machine,arch",
        [("x64", Arch.X86_64), ("arm64", Arch.ARM64), ("arm", Arch.ARMV7)],
    )
    def test_mapping_is_total(self, system, os_family, machine, arch):
        """Every supported OS/arch pair maps to a triple."""
        triple = get_platform_triple(system, machine)

        assert triple.os_family == os_family
        assert triple.arch == arch
        expected = ArchiveFormat.ZIP if system == "win32" else ArchiveFormat.TAR_GZ
        assert triple.archive_format == expected

    @pytest.mark.parametrize(
        "machine,arch",
        [("x86_64", Arch.X86_64), ("AMD64", Arch.X86_64), ("aarch64", Arch.ARM64), ("armv7l", Arch.ARMV7)],
    )
    def test_python_machine_names(self, machine, arch):
        """platform.machine() spellings are accepted too."""
        assert get_platform_triple("linux", machine).arch == arch

    def test_windows_extension(self):
        assert get_platform_triple("win32", "x64").extension == "zip"

    def test_linux_extension(self):
        assert get_platform_triple("linux", "x64").extension == "tar.gz"

    @pytest.mark.parametrize("system", ["freebsd", "aix", "cygwin", "sunos"])
    def test_unsupported_platform(self, system):
        with pytest.raises(UnsupportedPlatformError, match=f"Unsupported platform: {system}"):
            get_platform_triple(system, "x64")

    @pytest.mark.parametrize("machine", ["ia32", "ppc64", "s390x", "mips"])
    def test_unsupported_architecture(self, machine):
        with pytest.raises(UnsupportedPlatformError, match=f"Unsupported architecture: {machine}"):
            get_platform_triple("linux", machine)

    @patch("setup_bab._core.lifecycle.host_platform.machine", return_value="x86_64")
    @patch("setup_bab._core.lifecycle.sys")
    def test_detects_host(self, mock_sys, mock_machine):
        """Defaults come from sys.platform and platform.machine()."""
        mock_sys.platform = "darwin"

        triple = get_platform_triple()

        assert triple == PlatformTriple(OSFamily.MACOS, Arch.X86_64, ArchiveFormat.TAR_GZ)


class TestDownloadArchive:
    """Tests for download_archive function."""

    @patch("requests.get")
    def test_download_success(self, mock_get, tmp_path):
        mock_get.return_value = _download_response(b"archive-bytes-here")
        url = "https://github.com/bab-sh/bab/releases/download/v0.2.2/bab_0.2.2_Linux_x86_64.tar.gz"

        path = download_archive(url, tmp_path)

        assert path == tmp_path / "bab_0.2.2_Linux_x86_64.tar.gz"
        assert path.read_bytes() == b"archive-bytes-here"

    @patch("requests.get")
    def test_no_authorization_header(self, mock_get, tmp_path):
        """Asset downloads never carry the token."""
        mock_get.return_value = _download_response(b"x")

        download_archive("https://github.com/a/b/c.tar.gz", tmp_path)

        headers = mock_get.call_args[1]["headers"]
        assert "Authorization" not in headers

    @patch("requests.get")
    def test_http_error_removes_partial_file(self, mock_get, tmp_path):
        response = MagicMock()
        response.raise_for_status.side_effect = requests.exceptions.HTTPError("404")
        mock_get.return_value = response

        with pytest.raises(requests.RequestException):
            download_archive("https://github.com/a/b/c.tar.gz", tmp_path)

        assert not (tmp_path / "c.tar.gz").exists()

    @patch("requests.get")
    def test_response_is_closed(self, mock_get, tmp_path):
        response = _download_response(b"x")
        mock_get.return_value = response

        download_archive("https://github.com/a/b/c.tar.gz", tmp_path)

        response.close.assert_called_once()

    @patch("requests.get")
    def test_write_error_removes_partial_file(self, mock_get, tmp_path):
        """A failed write leaves no partial archive and still closes the response."""
        def chunks(chunk_size):
            yield b"partial"
            raise OSError("No space left on device")

        response = _download_response(b"")
        response.iter_content.side_effect = chunks
        mock_get.return_value = response

        with pytest.raises(OSError, match="No space left on device"):
            download_archive("https://github.com/a/b/c.tar.gz", tmp_path)

        assert not (tmp_path / "c.tar.gz").exists()
        response.close.assert_called_once()


class TestExtract:
    """Tests for archive extraction."""

    def test_extract_tar(self, tmp_path, bab_tarball):
        archive = write_bytes(tmp_path / "bab.tar.gz", bab_tarball)
        dest = tmp_path / "out"
        dest.mkdir()

        assert extract_tar(archive, dest) == dest
        assert (dest / "bab").exists()

    def test_extract_zip(self, tmp_path, bab_zip):
        archive = write_bytes(tmp_path / "bab.zip", bab_zip)
        dest = tmp_path / "out"
        dest.mkdir()

        assert extract_zip(archive, dest) == dest
        assert (dest / "bab.exe").read_bytes() == b"MZ fake"

    def test_corrupt_tar(self, tmp_path):
        archive = write_bytes(tmp_path / "bab.tar.gz", b"not a tarball")
        with pytest.raises(ExtractionError):
            extract_tar(archive, tmp_path)

    def test_corrupt_zip(self, tmp_path):
        archive = write_bytes(tmp_path / "bab.zip", b"not a zip")
        with pytest.raises(ExtractionError):
            extract_zip(archive, tmp_path)

    def test_dispatch_by_platform(self, tmp_path, windows_x64, bab_zip):
        archive = write_bytes(tmp_path / "bab.zip", bab_zip)
        dest = tmp_path / "out"
        dest.mkdir()

        extract_archive(archive, dest, windows_x64)

        assert (dest / "bab.exe").exists()


class TestRelocateBinary:
    """Tests for relocate_binary function."""

    def test_moves_binary_into_bin(self, tmp_path, linux_x64):
        (tmp_path / "bab").write_bytes(b"bin")

        bin_dir = relocate_binary(tmp_path, linux_x64)

        assert bin_dir == tmp_path / "bin"
        assert (bin_dir / "bab").exists()
        assert not (tmp_path / "bab").exists()

    def test_windows_binary_name(self, tmp_path, windows_x64):
        (tmp_path / "bab.exe").write_bytes(b"MZ")

        relocate_binary(tmp_path, windows_x64)

        assert (tmp_path / "bin" / "bab.exe").exists()

    def test_missing_binary_is_not_fatal(self, tmp_path, linux_x64):
        """A failed move is logged and bin/ is still created."""
        bin_dir = relocate_binary(tmp_path, linux_x64)

        assert bin_dir.is_dir()
        assert list(bin_dir.iterdir()) == []

    def test_binary_already_in_bin(self, tmp_path, linux_x64):
        """Archives that already ship bin/bab are left alone."""
        write_bytes(tmp_path / "bin" / "bab", b"bin")

        relocate_binary(tmp_path, linux_x64)

        assert (tmp_path / "bin" / "bab").read_bytes() == b"bin"


class TestInstall:
    """Tests for install async function."""

    @pytest.mark.asyncio
    async def test_cache_hit_short_circuits(self, settings, linux_x64, tmp_path):
        """A cached version makes no download, extraction or move calls."""
        cache = ToolCache(settings.tool_cache_dir)
        source = tmp_path / "src"
        write_bytes(source / "bin" / "bab", b"bin")
        cached = cache.save(source, "bab", "0.2.10", "x86_64")

        with patch("setup_bab._core.lifecycle.download_archive") as mock_download, \
                patch("setup_bab._core.lifecycle.extract_archive") as mock_extract, \
                patch("setup_bab._core.lifecycle.shutil.move") as mock_move, \
                patch("requests.get") as mock_get:
            result = await install("0.2.10", platform=linux_x64, settings=settings)

        assert result == cached
        mock_download.assert_not_called()
        mock_extract.assert_not_called()
        mock_move.assert_not_called()
        mock_get.assert_not_called()

    @pytest.mark.asyncio
    @patch("requests.get")
    async def test_cache_miss_downloads_and_caches(self, mock_get, settings, linux_x64, bab_tarball):
        mock_get.return_value = _download_response(bab_tarball)

        result = await install("0.2.10", platform=linux_x64, settings=settings)

        assert mock_get.call_args[0][0] == (
            "https://github.com/bab-sh/bab/releases/download/v0.2.10/"
            "bab_0.2.10_Linux_x86_64.tar.gz"
        )
        assert result == settings.tool_cache_dir / "bab" / "0.2.10" / "x86_64"
        assert (result / "bin" / "bab").exists()
        assert not (result / "bab").exists()
        assert (result / "LICENSE").exists()

    @pytest.mark.asyncio
    @patch("requests.get")
    async def test_second_install_is_cached(self, mock_get, settings, linux_x64, bab_tarball):
        mock_get.return_value = _download_response(bab_tarball)

        first = await install("0.2.10", platform=linux_x64, settings=settings)
        second = await install("0.2.10", platform=linux_x64, settings=settings)

        assert first == second
        assert mock_get.call_count == 1

    @pytest.mark.asyncio
    @patch("requests.get")
    async def test_temp_dirs_cleaned_up(self, mock_get, settings, linux_x64, bab_tarball):
        mock_get.return_value = _download_response(bab_tarball)

        await install("0.2.10", platform=linux_x64, settings=settings)

        assert list(settings.temp_dir.iterdir()) == []

    @pytest.mark.asyncio
    @patch("requests.get")
    async def test_download_failure(self, mock_get, settings, linux_x64):
        """Download errors name the tool and version."""
        response = MagicMock()
        response.raise_for_status.side_effect = requests.exceptions.HTTPError("404 Not Found")
        mock_get.return_value = response

        with pytest.raises(TransportError, match="Failed to download bab 0.2.10: 404 Not Found"):
            await install("0.2.10", platform=linux_x64, settings=settings)

        assert ToolCache(settings.tool_cache_dir).find("bab", "0.2.10", "x86_64") is None

    @pytest.mark.asyncio
    @patch("requests.get")
    async def test_write_failure_is_transport_error(self, mock_get, settings, linux_x64, bab_tarball):
        """Filesystem errors while saving the archive are reported as download failures."""
        mock_get.return_value = _download_response(bab_tarball)

        with patch(
            "setup_bab._core.lifecycle.open",
            create=True,
            side_effect=OSError("No space left on device"),
        ):
            with pytest.raises(
                TransportError, match="Failed to download bab 0.2.10: No space left on device"
            ) as exc_info:
                await install("0.2.10", platform=linux_x64, settings=settings)

        assert exc_info.value.status_code is None
        assert ToolCache(settings.tool_cache_dir).find("bab", "0.2.10", "x86_64") is None
        assert list(settings.temp_dir.iterdir()) == []

    @pytest.mark.asyncio
    @patch("requests.get")
    async def test_extraction_failure_propagates(self, mock_get, settings, linux_x64):
        mock_get.return_value = _download_response(b"definitely not gzip data")

        with pytest.raises(ExtractionError):
            await install("0.2.10", platform=linux_x64, settings=settings)

    @pytest.mark.asyncio
    @patch("requests.get")
    async def test_binary_missing_from_archive_still_caches(self, mock_get, settings, linux_x64):
        """Relocation failure is non-fatal."""
        mock_get.return_value = _download_response(make_tar_gz({"README.md": b"# bab"}))

        result = await install("0.2.10", platform=linux_x64, settings=settings)

        assert (result / "bin").is_dir()

    @pytest.mark.asyncio
    async def test_unsupported_platform_before_network(self, settings):
        with patch("setup_bab._core.lifecycle.sys") as mock_sys, \
                patch("requests.get") as mock_get:
            mock_sys.platform = "freebsd"
            with pytest.raises(UnsupportedPlatformError):
                await install("0.2.10", settings=settings)

        mock_get.assert_not_called()

    def test_install_sync(self, settings, linux_x64, tmp_path):
        cache = ToolCache(settings.tool_cache_dir)
        source = tmp_path / "src"
        write_bytes(source / "bin" / "bab", b"bin")
        cached = cache.save(source, "bab", "1.0.0", "x86_64")

        assert install_sync("1.0.0", platform=linux_x64, settings=settings) == cached
