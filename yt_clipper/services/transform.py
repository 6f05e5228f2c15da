# Copyright (c) 2026 Pointmatic
#
# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.

"""Single-pass ffmpeg transforms: vertical crop, subtitle burn-in, audio."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

from yt_clipper.core.errors import AssetNotFoundError, ClipperError, ToolUnavailableError
from yt_clipper.core.models import CropBox, TransformResult
from yt_clipper.core.options import ClipperSettings
from yt_clipper.services.gateway import TRANSCODER, ToolGateway
from yt_clipper.utils.ffmpeg import ProbeError, check_ffmpeg, probe_video_info

logger = logging.getLogger("yt_clipper")

# Anything wider than this (width / height) is not treated as vertical.
VERTICAL_RATIO_THRESHOLD = 0.6

VIDEO_CODEC_ARGS = ["-c:v", "libx264", "-preset", "medium"]
COPY_AUDIO_ARGS = ["-c:a", "copy"]

SUBTITLE_STYLES: dict[str, str] = {
    "social": (
        "FontSize=22,FontName=Arial,PrimaryColour=&H00FFFFFF,OutlineColour=&H003F85FF,"
        "BackColour=&H00000000,BorderStyle=1,Outline=2.2,Shadow=0.8,MarginV=30,Bold=1"
    ),
    "caption": (
        "FontSize=24,FontName=Helvetica,PrimaryColour=&H00FFFFFF,OutlineColour=&H00000000,"
        "BackColour=&H00000000,BorderStyle=1,Outline=1.8,Shadow=1.2,MarginV=25,Alignment=2"
    ),
    "simple": (
        "FontSize=20,FontName=Roboto,PrimaryColour=&H00FFFFFF,OutlineColour=&H00000000,"
        "BackColour=&H00000000,BorderStyle=1,Outline=1.5,Shadow=0.6,MarginV=20"
    ),
    "modern": (
        "FontSize=22,FontName=Montserrat,PrimaryColour=&H00FFFFFF,OutlineColour=&H002C5FFE,"
        "BackColour=&H00000000,BorderStyle=1,Outline=1.7,Shadow=0.7,MarginV=22,Alignment=2,Bold=0"
    ),
    "elegant": (
        "FontSize=21,FontName=Georgia,PrimaryColour=&H00FAFAFA,OutlineColour=&H00202020,"
        "BackColour=&H00000000,BorderStyle=1,Outline=1.3,Shadow=0.9,MarginV=22,Alignment=2,Italic=1"
    ),
    "default": (
        "FontSize=20,FontName=Arial,PrimaryColour=&H00FFFFFF,OutlineColour=&H00303030,"
        "BackColour=&H00000000,BorderStyle=1,Outline=1.5,Shadow=0.7,MarginV=20"
    ),
}


def resolve_style(name: str | None) -> tuple[str, str]:
    """Return ``(style_name, force_style)``; unknown names become ``default``."""
    key = (name or "default").lower()
    if key not in SUBTITLE_STYLES:
        logger.debug("Unknown subtitle style %r, using default", name)
        key = "default"
    return key, SUBTITLE_STYLES[key]


def compute_vertical_crop(width: int, height: int) -> CropBox:
    """Centered 9:16 crop box for a ``width`` x ``height`` frame.

    Frames wider than 9:16 lose their sides, narrower ones their top and
    bottom. Integer arithmetic keeps the floor semantics exact.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Invalid frame size {width}x{height}")
    if width * 16 > height * 9:
        crop_width = height * 9 // 16
        return CropBox(width=crop_width, height=height, x=(width - crop_width) // 2, y=0)
    crop_height = width * 16 // 9
    return CropBox(width=width, height=crop_height, x=0, y=(height - crop_height) // 2)


def vertical_output_path(video_path: Path) -> Path:
    return video_path.with_name(f"{video_path.stem}_vertical{video_path.suffix}")


def _escape_filter_path(path: Path) -> str:
    """Quote a path for use inside an ffmpeg filter argument."""
    text = path.as_posix()
    return text.replace("\\", "\\\\").replace(":", "\\:").replace("'", "\\'")


class VideoTransformPipeline:
    """ffmpeg-backed transforms, one transcoder invocation each.

    Operations report failure through ``TransformResult(success=False)``
    rather than raising, and never retry.
    """

    def __init__(self, gateway: ToolGateway, settings: ClipperSettings | None = None) -> None:
        self._gateway = gateway
        self._settings = settings or ClipperSettings()

    async def to_vertical(self, video_path: Path) -> TransformResult:
        """Crop ``video_path`` to 9:16 into ``<stem>_vertical<ext>``."""
        video_path = Path(video_path)
        try:
            await self._require(video_path)
            info = await probe_video_info(self._gateway, video_path)
            logger.info("Video dimensions: %dx%d", info.width, info.height)
            crop = compute_vertical_crop(info.width, info.height)
            logger.debug("Crop: %s", crop.filter)

            output_path = vertical_output_path(video_path)
            await self._transcode(
                ["-i", str(video_path), "-vf", crop.filter, *VIDEO_CODEC_ARGS, *COPY_AUDIO_ARGS, "-y", str(output_path)],
                "vertical crop",
            )
        except (ClipperError, ProbeError, ValueError) as exc:
            logger.error("Error processing video %s: %s", video_path, exc)
            return TransformResult(success=False, error=str(exc))

        logger.info("Vertical video written to %s", output_path)
        return TransformResult(success=True, output_path=output_path)

    async def burn_subtitles(
        self,
        video_path: Path,
        subtitle_path: Path,
        output_path: Path | None = None,
        style: str = "default",
    ) -> TransformResult:
        """Render ``subtitle_path`` into the picture of ``video_path``."""
        video_path = Path(video_path)
        subtitle_path = Path(subtitle_path)
        style_name, force_style = resolve_style(style)
        warning = None

        try:
            await self._require(video_path, subtitle_path)

            try:
                info = await probe_video_info(self._gateway, video_path)
            except ProbeError as exc:
                logger.warning("Could not read dimensions of %s: %s", video_path.name, exc)
            else:
                ratio = info.width / info.height
                logger.info("Video dimensions: %dx%d, aspect ratio: %.2f", info.width, info.height, ratio)
                if ratio > VERTICAL_RATIO_THRESHOLD:
                    warning = (
                        "The video does not appear to be in vertical format. "
                        "For best results, use the vertical version."
                    )
                    logger.warning(warning)

            if output_path is None:
                output_path = self._export_path(video_path, style_name)
            output_path = Path(output_path)
            output_path.parent.mkdir(parents=True, exist_ok=True)

            vf = f"subtitles={_escape_filter_path(subtitle_path)}:force_style='{force_style}'"
            await self._transcode(
                ["-i", str(video_path), "-vf", vf, *VIDEO_CODEC_ARGS, *COPY_AUDIO_ARGS, "-y", str(output_path)],
                "subtitle burn-in",
            )
        except (ClipperError, OSError) as exc:
            logger.error("Error creating video with subtitles: %s", exc)
            return TransformResult(success=False, error=str(exc), warning=warning)

        logger.info("Video with subtitles written to %s", output_path)
        return TransformResult(success=True, output_path=output_path, warning=warning)

    async def extract_audio(self, video_path: Path, destination: Path | None = None) -> TransformResult:
        """Pull the audio track out of ``video_path`` (``<stem>.mp3`` by default)."""
        video_path = Path(video_path)
        destination = Path(destination) if destination else video_path.with_suffix(".mp3")
        try:
            await self._require(video_path)
            await self._transcode(
                ["-i", str(video_path), "-q:a", "0", "-map", "a", "-vn", "-y", str(destination)],
                "audio extraction",
            )
        except ClipperError as exc:
            logger.error("Error extracting audio: %s", exc)
            return TransformResult(success=False, error=str(exc))

        logger.info("Audio extracted to %s", destination)
        return TransformResult(success=True, output_path=destination)

    def _export_path(self, video_path: Path, style_name: str) -> Path:
        timestamp = datetime.now().isoformat().replace(":", "-").replace(".", "-")
        export_dir = Path(self._settings.export_dir).expanduser()
        return export_dir / f"{video_path.stem}_{style_name}_{timestamp}{video_path.suffix}"

    async def _require(self, *paths: Path) -> None:
        for path in paths:
            if not path.exists():
                raise AssetNotFoundError(f"File not found: {path}")
        if not await check_ffmpeg(self._gateway):
            raise ToolUnavailableError("FFmpeg not available. Please install FFmpeg to process videos.")

    async def _transcode(self, args: list[str], label: str) -> None:
        result = await self._gateway.run(TRANSCODER, args)
        if not result.exit_succeeded:
            raise ClipperError(f"ffmpeg {label} failed: {result.stderr.strip()[-500:]}")
