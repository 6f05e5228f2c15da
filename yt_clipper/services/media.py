"""Per-asset downloads via yt-dlp, with discover-and-adopt of its output."""

from __future__ import annotations

import logging
from pathlib import Path

from yt_clipper.core.models import AssetKind, MediaAsset
from yt_clipper.core.options import ClipperSettings
from yt_clipper.services.gateway import DOWNLOADER, ToolGateway

logger = logging.getLogger("yt_clipper")

VIDEO_FORMAT = "bestvideo[ext=mp4]+bestaudio[ext=m4a]/best[ext=mp4]/best"

# Marks a subtitle file as auto-generated in its name.
AUTO_MARKER = "auto"


def discover_and_adopt(directory: Path, suffix: str, canonical: Path) -> Path | None:
    """Adopt the file yt-dlp most likely just produced.

    yt-dlp names its output after the (restricted) title, so the file is
    found by extension instead: the canonical path itself if it exists,
    otherwise the first ``*<suffix>`` file in name order, renamed to
    ``canonical``. Returns None when nothing matches.
    """
    if canonical.exists():
        return canonical
    for candidate in sorted(directory.iterdir()):
        if candidate.is_file() and candidate.name.endswith(suffix):
            candidate.rename(canonical)
            logger.debug("Adopted %s as %s", candidate.name, canonical.name)
            return canonical
    return None


def select_subtitle_candidate(directory: Path, canonical: Path) -> Path | None:
    """Keep the best ``.vtt`` candidate as ``canonical``, delete the rest.

    Prefers the first file without ``auto`` in its name, otherwise the first
    file in name order.
    """
    candidates = [
        p for p in sorted(directory.iterdir())
        if p.is_file() and p.suffix == ".vtt" and p != canonical
    ]
    if not candidates:
        return None

    logger.debug("Found %d subtitle file(s): %s", len(candidates), ", ".join(p.name for p in candidates))
    manual = [p for p in candidates if AUTO_MARKER not in p.name]
    chosen = manual[0] if manual else candidates[0]
    chosen.rename(canonical)

    for other in candidates:
        if other != chosen and other.exists():
            try:
                other.unlink()
            except OSError as exc:
                logger.warning("Failed to clean up subtitle file %s: %s", other.name, exc)
    return canonical


class MediaDownloader:
    """Runs the per-asset yt-dlp invocations for one URL into one directory.

    Every ``download_*`` method is best-effort: it returns a MediaAsset with
    ``present=False`` instead of raising when the tool fails.
    """

    def __init__(self, gateway: ToolGateway, settings: ClipperSettings, url: str, directory: Path, base_name: str) -> None:
        self._gateway = gateway
        self._settings = settings
        self.url = url
        self.directory = directory
        self.base_name = base_name

    def canonical(self, suffix: str) -> Path:
        return self.directory / f"{self.base_name}{suffix}"

    async def _run(self, args: list[str]) -> bool:
        result = await self._gateway.run(DOWNLOADER, [self.url, *args, "--restrict-filenames"])
        if not result.exit_succeeded:
            logger.debug("yt-dlp %s failed: %s", " ".join(args[:3]), result.stderr.strip()[-500:])
        return result.exit_succeeded

    async def download_video(self) -> MediaAsset:
        ext = self._settings.video_format
        ok = await self._run([
            "-o", str(self.directory / "%(title)s.%(ext)s"),
            "-f", VIDEO_FORMAT,
            "--merge-output-format", ext,
        ])
        return self._adopt(AssetKind.VIDEO, f".{ext}", ok)

    async def download_audio(self) -> MediaAsset:
        ext = self._settings.audio_format
        ok = await self._run([
            "-o", str(self.directory / "audio_%(title)s.%(ext)s"),
            "-x", "--audio-format", ext,
        ])
        return self._adopt(AssetKind.AUDIO, f".{ext}", ok)

    async def download_thumbnail(self) -> MediaAsset:
        ok = await self._run([
            "-o", str(self.directory / "thumb_%(title)s"),
            "--write-thumbnail",
            "--skip-download",
            "--convert-thumbnails", "jpg",
        ])
        return self._adopt(AssetKind.THUMBNAIL, ".jpg", ok)

    async def download_subtitles(self) -> MediaAsset:
        """Manual track, then auto captions, then every track.

        Placeholder synthesis is the caller's job when this comes back absent.
        """
        canonical = self.canonical(".vtt")
        lang = self._settings.subtitle_language

        for flag, prefix in (("--write-sub", "manual_subs_"), ("--write-auto-sub", "auto_subs_")):
            if await self._run([
                flag,
                "--skip-download",
                "--sub-format", "vtt",
                "--sub-lang", lang,
                "-o", str(self.directory / f"{prefix}%(title)s"),
            ]):
                logger.debug("Requested subtitles with %s", flag)

        if select_subtitle_candidate(self.directory, canonical):
            return MediaAsset(kind=AssetKind.SUBTITLE, path=canonical, present=True)

        logger.info("No subtitle files found, trying --all-subs")
        await self._run([
            "--all-subs",
            "--skip-download",
            "-o", str(self.directory / "all_subs_%(title)s"),
        ])
        if select_subtitle_candidate(self.directory, canonical):
            return MediaAsset(kind=AssetKind.SUBTITLE, path=canonical, present=True)

        return MediaAsset(kind=AssetKind.SUBTITLE, path=canonical, present=False)

    def _adopt(self, kind: AssetKind, suffix: str, ok: bool) -> MediaAsset:
        canonical = self.canonical(suffix)
        if not ok:
            return MediaAsset(kind=kind, path=canonical, present=False)
        found = discover_and_adopt(self.directory, suffix, canonical)
        if found is None:
            logger.warning("yt-dlp reported success but no %s file was found", suffix)
        return MediaAsset(kind=kind, path=canonical, present=found is not None)
