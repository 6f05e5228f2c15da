# Copyright (c) 2026 Pointmatic
#
# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.

"""Making sure the downloader tool is invocable before an acquisition."""

from __future__ import annotations

import asyncio
import logging
import os
import sys
from pathlib import Path

from yt_clipper.core.errors import ToolUnavailableError
from yt_clipper.core.options import ClipperSettings
from yt_clipper.services.gateway import DOWNLOADER, ToolGateway
from yt_clipper.utils.http import download_file

logger = logging.getLogger("yt_clipper")

RELEASE_URL = "https://github.com/yt-dlp/yt-dlp/releases/latest/download/{asset}"
_PIP = "pip"


def _is_windows() -> bool:
    return sys.platform == "win32"


def release_asset_name() -> str:
    return "yt-dlp.exe" if _is_windows() else "yt-dlp"


async def ensure_downloader(gateway: ToolGateway, settings: ClipperSettings) -> None:
    """Leave ``gateway`` able to run the downloader, or raise.

    Fallback order, stopping at the first working command:

    1. The configured downloader command (normally ``yt-dlp`` on PATH).
    2. The interpreter's own module (``python -m yt_dlp``).
    3. ``python -m pip install --upgrade yt-dlp`` then 2. again
       (skipped when ``allow_pip_install`` is off).
    4. The release binary for this OS, downloaded into ``bin_dir``.

    Raises:
        ToolUnavailableError: when every option failed.
    """
    if await gateway.probe(DOWNLOADER):
        return

    module_cmd = [sys.executable, "-m", "yt_dlp"]
    configured = gateway.command_for(DOWNLOADER)

    gateway.register(DOWNLOADER, module_cmd)
    if await gateway.probe(DOWNLOADER):
        logger.info("Using downloader module via %s", sys.executable)
        return

    if settings.allow_pip_install:
        logger.info("Downloader not found, installing yt-dlp with pip...")
        gateway.register(_PIP, [sys.executable, "-m", "pip"])
        installed = await gateway.run(_PIP, ["install", "--upgrade", "yt-dlp"])
        if installed.exit_succeeded and await gateway.probe(DOWNLOADER):
            logger.info("Installed yt-dlp with pip")
            return
        logger.warning("pip install of yt-dlp failed: %s", installed.stderr.strip()[-500:])

    try:
        binary = await _download_release_binary(settings.bin_dir, settings.http_timeout)
    except Exception as exc:
        gateway.register(DOWNLOADER, configured)
        raise ToolUnavailableError(f"yt-dlp unavailable, binary download failed: {exc}") from exc

    gateway.register(DOWNLOADER, [str(binary)])
    if await gateway.probe(DOWNLOADER):
        logger.info("Using downloaded yt-dlp binary at %s", binary)
        return

    gateway.register(DOWNLOADER, configured)
    raise ToolUnavailableError(f"Downloaded yt-dlp binary at {binary} does not run")


async def _download_release_binary(bin_dir: Path, timeout: float) -> Path:
    """Fetch the platform's release binary and mark it executable."""
    asset = release_asset_name()
    dest = bin_dir / asset
    url = RELEASE_URL.format(asset=asset)
    logger.info("Downloading %s to %s", url, dest)

    loop = asyncio.get_running_loop()
    await loop.run_in_executor(None, lambda: download_file(url, dest, timeout=timeout))

    if not _is_windows():
        os.chmod(dest, 0o755)
    return dest
