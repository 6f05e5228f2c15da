# Copyright (c) 2026 Pointmatic
#
# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.

"""ffmpeg detection and ffprobe helpers."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from yt_clipper.core.models import VideoInfo
from yt_clipper.services.gateway import PROBER, TRANSCODER, ToolGateway

logger = logging.getLogger("yt_clipper")


class ProbeError(Exception):
    """Raised when ffprobe output cannot be obtained or understood."""


async def check_ffmpeg(gateway: ToolGateway) -> bool:
    """Return True if ffmpeg answers ``-version``."""
    return await gateway.probe(TRANSCODER, ["-version"])


async def probe_duration(gateway: ToolGateway, media_path: Path) -> float | None:
    """Return the container duration in seconds, or None if unknown."""
    result = await gateway.run(
        PROBER,
        [
            "-v", "error",
            "-show_entries", "format=duration",
            "-of", "default=noprint_wrappers=1:nokey=1",
            str(media_path),
        ],
    )
    if not result.exit_succeeded:
        return None
    try:
        return float(result.stdout.strip())
    except ValueError:
        return None


async def probe_streams(gateway: ToolGateway, media_path: Path) -> list[dict]:
    """List container streams as ``{"index": int, "codec_type": str}`` dicts."""
    result = await gateway.run(
        PROBER,
        [
            "-v", "error",
            "-show_entries", "stream=index,codec_type",
            "-of", "json",
            str(media_path),
        ],
    )
    if not result.exit_succeeded:
        raise ProbeError(f"ffprobe failed for {media_path}: {result.stderr.strip()}")
    try:
        data = json.loads(result.stdout)
    except json.JSONDecodeError as exc:
        raise ProbeError(f"Unreadable ffprobe output for {media_path}") from exc
    return data.get("streams") or []


async def probe_video_info(gateway: ToolGateway, video_path: Path) -> VideoInfo:
    """Width, height and duration of the first video stream."""
    result = await gateway.run(
        PROBER,
        [
            "-v", "error",
            "-select_streams", "v:0",
            "-show_entries", "stream=width,height,duration",
            "-of", "json",
            str(video_path),
        ],
    )
    if not result.exit_succeeded:
        raise ProbeError(f"ffprobe failed for {video_path}: {result.stderr.strip()}")
    try:
        streams = json.loads(result.stdout).get("streams") or []
        stream = streams[0]
        width, height = int(stream["width"]), int(stream["height"])
        duration = float(stream.get("duration") or 0)
    except (json.JSONDecodeError, IndexError, KeyError, TypeError, ValueError) as exc:
        raise ProbeError(f"No video stream dimensions for {video_path}") from exc
    if width <= 0 or height <= 0:
        raise ProbeError(f"Invalid video dimensions {width}x{height} for {video_path}")
    return VideoInfo(width=width, height=height, duration=duration)
