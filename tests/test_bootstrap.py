"""Tests for yt_clipper.services.bootstrap."""

import asyncio
import sys
from unittest.mock import patch

import pytest

from yt_clipper.core.errors import ToolUnavailableError
from yt_clipper.core.options import ClipperSettings
from yt_clipper.services.bootstrap import ensure_downloader, release_asset_name

MODULE_CMD = [sys.executable, "-m", "yt_dlp"]


def _settings(tmp_path, **kwargs) -> ClipperSettings:
    return ClipperSettings(bin_dir=tmp_path / "bin", **kwargs)


class TestEnsureDownloader:
    def test_configured_command_works(self, gateway, tmp_path):
        gateway.on("yt-dlp", lambda args: "2024.01.01\n")

        asyncio.run(ensure_downloader(gateway, _settings(tmp_path)))

        assert gateway.command_for("yt-dlp") == ["yt-dlp"]
        assert gateway.calls == [("yt-dlp", ["--version"])]

    def test_module_fallback(self, gateway, tmp_path):
        responses = iter([False, True])
        gateway.on("yt-dlp", lambda args: next(responses))

        asyncio.run(ensure_downloader(gateway, _settings(tmp_path)))

        assert gateway.command_for("yt-dlp") == MODULE_CMD
        assert gateway.calls_to("pip") == []

    def test_pip_install(self, gateway, tmp_path):
        responses = iter([False, False, True])
        gateway.on("yt-dlp", lambda args: next(responses))
        gateway.on("pip", lambda args: True)

        asyncio.run(ensure_downloader(gateway, _settings(tmp_path)))

        assert gateway.calls_to("pip") == [["install", "--upgrade", "yt-dlp"]]
        assert gateway.command_for("pip") == [sys.executable, "-m", "pip"]
        assert gateway.command_for("yt-dlp") == MODULE_CMD

    @patch("yt_clipper.services.bootstrap.download_file")
    def test_release_binary(self, mock_download, gateway, tmp_path):
        def fake_download(url, dest, timeout):
            dest.parent.mkdir(parents=True, exist_ok=True)
            dest.write_bytes(b"#!/bin/sh\n")
            return dest

        mock_download.side_effect = fake_download
        responses = iter([False, False, True])
        gateway.on("yt-dlp", lambda args: next(responses))

        asyncio.run(ensure_downloader(gateway, _settings(tmp_path, allow_pip_install=False)))

        binary = tmp_path / "bin" / release_asset_name()
        assert gateway.command_for("yt-dlp") == [str(binary)]
        assert gateway.calls_to("pip") == []
        assert mock_download.call_args.args[0].endswith("/releases/latest/download/" + release_asset_name())

    @patch("yt_clipper.services.bootstrap.download_file", side_effect=OSError("offline"))
    def test_everything_fails(self, mock_download, gateway, tmp_path):
        with pytest.raises(ToolUnavailableError, match="offline"):
            asyncio.run(ensure_downloader(gateway, _settings(tmp_path)))
        assert gateway.command_for("yt-dlp") == ["yt-dlp"]

    @patch("yt_clipper.services.bootstrap.download_file")
    def test_downloaded_binary_does_not_run(self, mock_download, gateway, tmp_path):
        def fake_download(url, dest, timeout):
            dest.parent.mkdir(parents=True, exist_ok=True)
            dest.write_bytes(b"")
            return dest

        mock_download.side_effect = fake_download
        with pytest.raises(ToolUnavailableError, match="does not run"):
            asyncio.run(ensure_downloader(gateway, _settings(tmp_path, allow_pip_install=False)))
        assert gateway.command_for("yt-dlp") == ["yt-dlp"]


class TestReleaseAssetName:
    def test_windows(self):
        with patch("yt_clipper.services.bootstrap.sys.platform", "win32"):
            assert release_asset_name() == "yt-dlp.exe"

    def test_posix(self):
        with patch("yt_clipper.services.bootstrap.sys.platform", "linux"):
            assert release_asset_name() == "yt-dlp"
