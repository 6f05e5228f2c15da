# Copyright (c) 2026 Pointmatic
#
# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.

"""Subtitle resolution for a local video, with a chain of fallbacks."""

from __future__ import annotations

import logging
import random
import shutil
from pathlib import Path

from yt_clipper.core.errors import AssetNotFoundError
from yt_clipper.core.models import SubtitleCue, SubtitleDocument, SubtitleOrigin
from yt_clipper.core.options import ClipperSettings, ResolveOptions
from yt_clipper.services.gateway import DOWNLOADER, TRANSCODER, ToolGateway
from yt_clipper.services.id_parser import find_id_token, watch_url
from yt_clipper.services.vtt import read_vtt, write_vtt
from yt_clipper.utils.ffmpeg import probe_duration, probe_streams

logger = logging.getLogger("yt_clipper")

PLACEHOLDER_MESSAGES = (
    "Ambient sound",
    "Sound continues",
    "Music playing",
    "Sound effects",
    "Background noise",
)
PLACEHOLDER_SEGMENT_SECONDS = 5
DEFAULT_DURATION_SECONDS = 60.0

# Path fragment that marks a file as coming out of a platform download.
PLATFORM_PATH_MARKER = "youtube"


def canonical_subtitle_path(video_path: Path) -> Path:
    return video_path.with_suffix(".vtt")


def build_placeholder_cues(duration: float, rng: random.Random | None = None) -> list[SubtitleCue]:
    """Timed filler cues every 5 seconds across ``[0, duration]``.

    The last cue ends exactly at ``duration``. Each cue's id is its start
    offset in seconds.
    """
    rng = rng or random.Random()
    cues: list[SubtitleCue] = []
    start = 0
    while start < duration:
        cues.append(
            SubtitleCue(
                id=str(start),
                start_seconds=float(start),
                end_seconds=min(float(start + PLACEHOLDER_SEGMENT_SECONDS), duration),
                text=rng.choice(PLACEHOLDER_MESSAGES),
            )
        )
        start += PLACEHOLDER_SEGMENT_SECONDS
    return cues


class SubtitleSynthesisEngine:
    """Resolves a cue sequence for a video file.

    Strategies, first success wins:

    1. reuse ``<stem>.vtt`` next to the video
    2. convert or copy ``<stem>.srt`` / ``<stem>.en.vtt`` / ``<stem>.en.srt``
    3. extract the first embedded subtitle stream
    4. fetch platform auto-captions (opt-in, platform downloads only)
    5. synthesize placeholder cues from the media duration

    Any exception inside a strategy counts as that strategy failing. The
    last strategy cannot fail, so ``resolve`` always returns a document.
    """

    def __init__(
        self,
        gateway: ToolGateway,
        settings: ClipperSettings | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._gateway = gateway
        self._settings = settings or ClipperSettings()
        self._rng = rng or random.Random()

    async def resolve(self, video_path: Path, options: ResolveOptions | None = None) -> SubtitleDocument:
        options = options or ResolveOptions()
        video_path = Path(video_path)
        if not video_path.exists():
            raise AssetNotFoundError(f"Video file not found: {video_path}")

        canonical = canonical_subtitle_path(video_path)
        strategies = [
            (SubtitleOrigin.REUSED, self._reuse),
            (SubtitleOrigin.CONVERTED, self._convert_sibling),
            (SubtitleOrigin.EMBEDDED_EXTRACTED, self._extract_embedded),
        ]
        if options.try_platform_auto:
            strategies.append((SubtitleOrigin.PLATFORM_AUTO, self._fetch_platform_auto))

        for origin, strategy in strategies:
            try:
                cues = await strategy(video_path, canonical)
            except Exception as exc:
                logger.warning("Subtitle strategy %s failed for %s: %s", origin.value, video_path.name, exc)
                continue
            if cues:
                logger.info("Subtitles for %s resolved via %s (%d cues)", video_path.name, origin.value, len(cues))
                return SubtitleDocument(cues=cues, origin=origin, path=canonical)
            logger.debug("Subtitle strategy %s produced nothing for %s", origin.value, video_path.name)

        cues = await self.synthesize_placeholder(video_path, canonical)
        return SubtitleDocument(
            cues=cues,
            origin=SubtitleOrigin.SYNTHESIZED_PLACEHOLDER,
            path=canonical,
        )

    async def synthesize_placeholder(self, media_path: Path, canonical: Path) -> list[SubtitleCue]:
        """Write placeholder cues for ``media_path`` to ``canonical``."""
        duration = None
        try:
            duration = await probe_duration(self._gateway, media_path)
        except Exception as exc:
            logger.warning("Duration probe failed for %s: %s", media_path.name, exc)
        if not duration or duration <= 0:
            logger.debug("Using default duration of %ss for %s", DEFAULT_DURATION_SECONDS, media_path.name)
            duration = DEFAULT_DURATION_SECONDS

        cues = build_placeholder_cues(duration, self._rng)
        write_vtt(cues, canonical)
        logger.info("Generated %d placeholder subtitles at %s", len(cues), canonical)
        return cues

    async def _reuse(self, video_path: Path, canonical: Path) -> list[SubtitleCue]:
        if not canonical.exists():
            return []
        return read_vtt(canonical)

    async def _convert_sibling(self, video_path: Path, canonical: Path) -> list[SubtitleCue]:
        stem = video_path.with_suffix("")
        candidates = [
            Path(f"{stem}.srt"),
            Path(f"{stem}.en.vtt"),
            Path(f"{stem}.en.srt"),
        ]
        for candidate in candidates:
            if not candidate.exists():
                continue
            logger.debug("Found sibling subtitle file %s", candidate.name)
            if candidate.suffix == ".vtt":
                shutil.copyfile(candidate, canonical)
            else:
                result = await self._gateway.run(TRANSCODER, ["-i", str(candidate), "-y", str(canonical)])
                if not result.exit_succeeded:
                    logger.warning("Could not convert %s to WebVTT", candidate.name)
                    continue
            if canonical.exists():
                cues = read_vtt(canonical)
                if cues:
                    return cues
        return []

    async def _extract_embedded(self, video_path: Path, canonical: Path) -> list[SubtitleCue]:
        streams = await probe_streams(self._gateway, video_path)
        subtitle_streams = [s for s in streams if s.get("codec_type") == "subtitle"]
        if not subtitle_streams:
            logger.debug("No subtitle streams in %s", video_path.name)
            return []

        index = subtitle_streams[0].get("index", 0)
        result = await self._gateway.run(
            TRANSCODER,
            ["-i", str(video_path), "-map", f"0:{index}", "-y", str(canonical)],
        )
        if not result.exit_succeeded or not canonical.exists():
            return []
        return read_vtt(canonical)

    async def _fetch_platform_auto(self, video_path: Path, canonical: Path) -> list[SubtitleCue]:
        if PLATFORM_PATH_MARKER not in str(video_path).lower():
            return []
        video_id = find_id_token(video_path.name)
        if video_id is None:
            return []

        lang = self._settings.subtitle_language
        output_base = video_path.with_suffix("")
        result = await self._gateway.run(
            DOWNLOADER,
            [
                "--write-auto-sub",
                "--skip-download",
                "--sub-lang", lang,
                "--convert-subs", "vtt",
                "--output", str(output_base),
                watch_url(video_id),
            ],
        )
        produced = Path(f"{output_base}.{lang}.vtt")
        if not result.exit_succeeded or not produced.exists():
            return []
        shutil.copyfile(produced, canonical)
        return read_vtt(canonical)
