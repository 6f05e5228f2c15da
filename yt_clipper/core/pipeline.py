"""Per-URL acquisition pipeline."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from yt_clipper.core.errors import AcquisitionError, ClipperError, ToolUnavailableError
from yt_clipper.core.logging import log_event
from yt_clipper.core.models import AcquisitionResult, AssetKind, BatchResult, MediaAsset, Metadata
from yt_clipper.core.options import AcquireOptions, ClipperSettings
from yt_clipper.core.workspace import Workspace
from yt_clipper.services.bootstrap import ensure_downloader
from yt_clipper.services.gateway import ToolGateway
from yt_clipper.services.id_parser import parse_video_id
from yt_clipper.services.media import MediaDownloader
from yt_clipper.services.metadata import (
    MetadataError,
    fetch_metadata,
    fetch_oembed_metadata,
    sanitize_title,
    thumbnail_url,
)
from yt_clipper.services.subtitles import SubtitleSynthesisEngine
from yt_clipper.utils.http import download_file

logger = logging.getLogger("yt_clipper")


class MediaAcquisitionPipeline:
    """Downloads the assets of one YouTube URL into a fresh working directory.

    Steps:
    1. Create a ``youtube_<ms>`` working directory (fatal on failure)
    2. Make sure yt-dlp runs; otherwise fall back to oEmbed metadata only
    3. Fetch metadata; the sanitized title names every output file
    4. Download video, audio, subtitles and thumbnail, each best-effort
    5. Return an AcquisitionResult, with ``warning`` set for missing assets
    """

    def __init__(
        self,
        settings: ClipperSettings | None = None,
        gateway: ToolGateway | None = None,
        workspace: Workspace | None = None,
        subtitle_engine: SubtitleSynthesisEngine | None = None,
    ) -> None:
        self.settings = settings or ClipperSettings()
        self.gateway = gateway or ToolGateway.from_settings(self.settings)
        self.workspace = workspace or Workspace(self.settings.downloads_dir)
        self.subtitle_engine = subtitle_engine or SubtitleSynthesisEngine(self.gateway, self.settings)
        # One downloader bootstrap per pipeline; every acquisition shares its outcome.
        self._downloader_lock = asyncio.Lock()
        self._downloader_checked = False
        self._downloader_error: str | None = None

    async def _ensure_downloader(self) -> None:
        async with self._downloader_lock:
            if not self._downloader_checked:
                try:
                    await ensure_downloader(self.gateway, self.settings)
                except ToolUnavailableError as exc:
                    self._downloader_error = str(exc)
                self._downloader_checked = True
        if self._downloader_error is not None:
            raise ToolUnavailableError(self._downloader_error)

    async def acquire(self, url: str, options: AcquireOptions | None = None) -> AcquisitionResult:
        options = options or AcquireOptions()
        if not url or not url.strip():
            raise AcquisitionError("URL is required")
        url = url.strip()

        working_dir = self.workspace.create()
        log_event(logging.INFO, f"Acquiring {url} into {working_dir}", stage="workspace", event="created")

        try:
            await self._ensure_downloader()
        except ToolUnavailableError as exc:
            logger.warning("yt-dlp unavailable, using metadata-only fallback: %s", exc)
            return await self._metadata_only(url, working_dir, str(exc))

        warnings: list[str] = []
        try:
            metadata = await fetch_metadata(self.gateway, url)
        except MetadataError as exc:
            logger.warning("Metadata fetch failed for %s: %s", url, exc)
            warnings.append(f"Metadata unavailable: {exc}")
            metadata = await self._fallback_metadata(url)

        if not options.wants_media:
            logger.info("No downloads requested for %s, returning metadata only", url)
            return self._build_result(metadata, url, working_dir, [], warnings)

        base_name = sanitize_title(metadata.title)
        downloader = MediaDownloader(self.gateway, self.settings, url, working_dir, base_name)
        assets: list[MediaAsset] = []

        if options.download_video:
            assets.append(await self._download(downloader.download_video, AssetKind.VIDEO, metadata, downloader))
        if options.download_audio:
            assets.append(await self._download(downloader.download_audio, AssetKind.AUDIO, metadata, downloader))
        if options.download_subtitles:
            subtitle = await self._download(downloader.download_subtitles, AssetKind.SUBTITLE, metadata, downloader)
            if not subtitle.present:
                subtitle = await self._placeholder_subtitles(subtitle, assets)
            assets.append(subtitle)
        if options.download_thumbnail:
            assets.append(await self._download(downloader.download_thumbnail, AssetKind.THUMBNAIL, metadata, downloader))

        missing = [a.kind.value for a in assets if not a.present]
        if assets and len(missing) == len(assets):
            warnings.append("No files were successfully downloaded")
        elif missing:
            warnings.append(f"Some assets could not be downloaded: {', '.join(missing)}")

        return self._build_result(metadata, url, working_dir, assets, warnings)

    async def _download(self, step, kind: AssetKind, metadata: Metadata, downloader: MediaDownloader) -> MediaAsset:
        try:
            asset = await step()
        except Exception as exc:
            logger.warning("Failed to download %s: %s", kind.value, exc)
            asset = MediaAsset(kind=kind, path=None, present=False)
        log_event(
            logging.INFO if asset.present else logging.WARNING,
            f"{kind.value} {'saved to ' + str(asset.path) if asset.present else 'not available'}",
            video_id=metadata.video_id,
            stage=kind.value,
            event="downloaded" if asset.present else "missing",
        )
        return asset

    async def _placeholder_subtitles(self, subtitle: MediaAsset, assets: list[MediaAsset]) -> MediaAsset:
        source = next(
            (a.path for a in assets if a.present and a.kind in (AssetKind.VIDEO, AssetKind.AUDIO)),
            None,
        )
        if source is None or subtitle.path is None:
            return subtitle
        logger.info("Creating placeholder subtitles based on %s", source.name)
        try:
            await self.subtitle_engine.synthesize_placeholder(source, subtitle.path)
        except Exception as exc:
            logger.warning("Failed to create placeholder subtitles: %s", exc)
            return subtitle
        return MediaAsset(kind=AssetKind.SUBTITLE, path=subtitle.path, present=True)

    async def _fallback_metadata(self, url: str) -> Metadata:
        """Best available metadata without yt-dlp. Never raises."""
        video_id = parse_video_id(url)
        if video_id is not None:
            try:
                return await self._oembed(video_id, url)
            except MetadataError as exc:
                logger.warning("%s", exc)
        return Metadata(
            video_id=video_id,
            source_url=url,
            title=video_id or "Unknown Title",
            metadata_source="none",
        )

    async def _oembed(self, video_id: str, url: str) -> Metadata:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            None,
            lambda: fetch_oembed_metadata(
                video_id,
                url,
                timeout=self.settings.http_timeout,
                retries=self.settings.http_retries,
            ),
        )

    async def _metadata_only(self, url: str, working_dir: Path, reason: str) -> AcquisitionResult:
        """Title, channel and thumbnail without the downloader.

        Raises:
            AcquisitionError: if no video ID can be derived from ``url``.
        """
        video_id = parse_video_id(url)
        if video_id is None:
            raise AcquisitionError(f"Could not extract video ID from URL: {url}. yt-dlp unavailable: {reason}")
        logger.info("Extracted video ID: %s", video_id)

        warnings = [f"yt-dlp not available: {reason}. Using fallback with limited information."]
        try:
            metadata = await self._oembed(video_id, url)
        except MetadataError as exc:
            logger.warning("%s", exc)
            warnings.append(str(exc))
            metadata = Metadata(video_id=video_id, source_url=url, title=video_id, metadata_source="none")

        thumbnail_path = working_dir / f"{sanitize_title(metadata.title)}.jpg"
        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(
                None,
                lambda: download_file(
                    thumbnail_url(video_id),
                    thumbnail_path,
                    timeout=self.settings.http_timeout,
                    retries=self.settings.http_retries,
                ),
            )
            thumbnail = MediaAsset(kind=AssetKind.THUMBNAIL, path=thumbnail_path, present=True)
        except Exception as exc:
            logger.warning("Thumbnail download failed for %s: %s", video_id, exc)
            thumbnail = MediaAsset(kind=AssetKind.THUMBNAIL, path=thumbnail_path, present=False)

        return self._build_result(metadata, url, working_dir, [thumbnail], warnings)

    @staticmethod
    def _build_result(
        metadata: Metadata,
        url: str,
        working_dir: Path,
        assets: list[MediaAsset],
        warnings: list[str],
    ) -> AcquisitionResult:
        return AcquisitionResult(
            video_id=metadata.video_id,
            title=metadata.title,
            channel=metadata.channel,
            duration_seconds=metadata.duration_seconds,
            upload_date=metadata.upload_date,
            description=metadata.description,
            source_url=url,
            working_directory=working_dir,
            assets=assets,
            warning="; ".join(warnings) if warnings else None,
        )


async def acquire_many(
    urls: list[str],
    options: AcquireOptions | None = None,
    pipeline: MediaAcquisitionPipeline | None = None,
    workers: int | None = None,
) -> BatchResult:
    """Acquire several URLs concurrently.

    Uses a semaphore to limit concurrent acquisitions. Each URL gets its own
    working directory; one failure does not stop the others.
    """
    pipeline = pipeline or MediaAcquisitionPipeline()
    semaphore = asyncio.Semaphore(workers or pipeline.settings.workers)

    async def _worker(url: str) -> AcquisitionResult | ClipperError:
        async with semaphore:
            try:
                return await pipeline.acquire(url, options)
            except ClipperError as exc:
                logger.error("Acquisition failed for %s: %s", url, exc)
                return exc

    completed = await asyncio.gather(*(_worker(url) for url in urls))

    results = [r for r in completed if isinstance(r, AcquisitionResult)]
    errors = {url: str(r) for url, r in zip(urls, completed) if isinstance(r, ClipperError)}
    return BatchResult(
        total=len(urls),
        succeeded=len(results),
        failed=len(errors),
        results=results,
        errors=errors,
    )
