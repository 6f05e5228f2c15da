"""yt-clipper: YouTube media acquisition, subtitle resolution and clip transforms."""

__version__ = "0.1.0"

from pathlib import Path

from yt_clipper.core.models import (
    AcquisitionResult,
    AssetKind,
    MediaAsset,
    SubtitleCue,
    SubtitleDocument,
    SubtitleOrigin,
    TransformResult,
)
from yt_clipper.core.options import AcquireOptions, ClipperSettings, ResolveOptions


def acquire(
    url: str,
    options: AcquireOptions | None = None,
    settings: ClipperSettings | None = None,
) -> AcquisitionResult:
    """Download the assets of one YouTube URL into a fresh working directory.

    This is the primary library entry point for acquisition.

    Args:
        url: YouTube watch, short or youtu.be URL.
        options: Which assets to fetch. Everything by default.
        settings: Tool paths and directories. Uses env/YAML/defaults if not provided.

    Returns:
        AcquisitionResult; ``warning`` is set when some assets are missing.

    Raises:
        WorkspaceError, AcquisitionError: on the fatal paths.
    """
    import asyncio

    from yt_clipper.core.pipeline import MediaAcquisitionPipeline

    return asyncio.run(MediaAcquisitionPipeline(settings).acquire(url, options))


def resolve_subtitles(
    video_path: str | Path,
    options: ResolveOptions | None = None,
    settings: ClipperSettings | None = None,
) -> SubtitleDocument:
    """Resolve a cue sequence for a local video, synthesizing one if needed."""
    import asyncio

    from yt_clipper.services.gateway import ToolGateway
    from yt_clipper.services.subtitles import SubtitleSynthesisEngine

    settings = settings or ClipperSettings()
    engine = SubtitleSynthesisEngine(ToolGateway.from_settings(settings), settings)
    return asyncio.run(engine.resolve(Path(video_path), options))


def _transformer(settings: ClipperSettings | None):
    from yt_clipper.services.gateway import ToolGateway
    from yt_clipper.services.transform import VideoTransformPipeline

    settings = settings or ClipperSettings()
    return VideoTransformPipeline(ToolGateway.from_settings(settings), settings)


def to_vertical(video_path: str | Path, settings: ClipperSettings | None = None) -> TransformResult:
    """Crop a video to a centered 9:16 frame beside the original."""
    import asyncio

    return asyncio.run(_transformer(settings).to_vertical(Path(video_path)))


def burn_subtitles(
    video_path: str | Path,
    subtitle_path: str | Path,
    output_path: str | Path | None = None,
    style: str = "default",
    settings: ClipperSettings | None = None,
) -> TransformResult:
    """Render subtitles into the video picture using a named style."""
    import asyncio

    return asyncio.run(
        _transformer(settings).burn_subtitles(
            Path(video_path),
            Path(subtitle_path),
            Path(output_path) if output_path else None,
            style,
        )
    )


def extract_audio(
    video_path: str | Path,
    destination: str | Path | None = None,
    settings: ClipperSettings | None = None,
) -> TransformResult:
    """Extract the audio track of a video to mp3."""
    import asyncio

    return asyncio.run(
        _transformer(settings).extract_audio(
            Path(video_path),
            Path(destination) if destination else None,
        )
    )


__all__ = [
    "__version__",
    "acquire",
    "resolve_subtitles",
    "to_vertical",
    "burn_subtitles",
    "extract_audio",
    "AcquireOptions",
    "ResolveOptions",
    "ClipperSettings",
    "AcquisitionResult",
    "AssetKind",
    "MediaAsset",
    "SubtitleCue",
    "SubtitleDocument",
    "SubtitleOrigin",
    "TransformResult",
]
