# Copyright (c) 2026 Pointmatic
#
# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.

"""CLI entry point for yt-clipper."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import click

from yt_clipper import __version__
from yt_clipper.core.errors import ClipperError
from yt_clipper.core.logging import get_logger, setup_logging
from yt_clipper.core.models import TransformResult
from yt_clipper.core.options import AcquireOptions, ClipperSettings, ResolveOptions
from yt_clipper.core.workspace import Workspace
from yt_clipper.core.writer import write_model_json


# Exit codes
EXIT_OK = 0
EXIT_ERROR = 1
EXIT_PARTIAL = 2
EXIT_ALL_FAILED = 3


def _common_options(fn):
    """Shared Click options that map to ClipperSettings fields."""
    decorators = [
        click.option("--downloads-dir", type=click.Path(path_type=Path), default=None, help="Root for working directories."),
        click.option("--export-dir", type=click.Path(path_type=Path), default=None, help="Directory for burned-in exports."),
        click.option("--tool-timeout", type=float, default=None, help="Seconds before a yt-dlp/ffmpeg call is killed."),
        click.option("--verbose", is_flag=True, default=None, help="Verbose console output."),
        click.option("--log-file", type=click.Path(path_type=Path), default=None, help="Also write JSONL logs here."),
    ]
    for decorator in reversed(decorators):
        fn = decorator(fn)
    return fn


def _build_settings(**cli_kwargs) -> ClipperSettings:
    """Build ClipperSettings from CLI kwargs, filtering out unset (None) values.

    Unset flags fall through to env vars -> YAML -> defaults.
    """
    overrides = {key: value for key, value in cli_kwargs.items() if value is not None}
    return ClipperSettings(**overrides)


def _startup(log_file: Path | None, **kwargs) -> ClipperSettings:
    """Configure logging and prune stale working directories, once per run."""
    settings = _build_settings(**kwargs)
    setup_logging(verbose=settings.verbose, jsonl_path=log_file)
    Workspace(settings.downloads_dir).cleanup(settings.stale_workspace_days)
    return settings


def _exit_code(total: int, failed: int, strict: bool) -> int:
    """Determine exit code from batch results."""
    if total == 0 or failed == 0:
        return EXIT_OK
    if failed == total:
        return EXIT_ALL_FAILED
    if strict:
        return EXIT_PARTIAL
    return EXIT_OK


def _finish_transform(result: TransformResult) -> None:
    log = get_logger()
    if not result.success:
        log.error("%s", result.error)
        sys.exit(EXIT_ERROR)
    click.echo(str(result.output_path))
    sys.exit(EXIT_OK)


@click.group()
@click.version_option(version=__version__, prog_name="yt_clipper")
def cli() -> None:
    """YouTube media acquisition, subtitle resolution and clip transforms."""


@cli.command()
@click.argument("urls", nargs=-1)
@click.option("--file", "file_path", type=click.Path(exists=True, path_type=Path), default=None, help="Text file with one URL per line.")
@click.option("--video/--no-video", default=True, help="Download the video.")
@click.option("--audio/--no-audio", default=True, help="Extract the audio track.")
@click.option("--subtitles/--no-subtitles", default=True, help="Download or synthesize subtitles.")
@click.option("--thumbnail/--no-thumbnail", default=True, help="Download the thumbnail.")
@click.option("--workers", type=int, default=None, help="Concurrent acquisitions.")
@click.option("--strict", is_flag=True, default=False, help="Exit 2 on partial failure.")
@click.option("--summary", "summary_path", type=click.Path(path_type=Path), default=None, help="Write the batch result JSON here.")
@_common_options
def acquire(urls, file_path, video, audio, subtitles, thumbnail, workers, strict, summary_path, log_file, **kwargs):
    """Download video, audio, subtitles and thumbnail for URLS."""
    settings = _startup(log_file, workers=workers, **kwargs)
    log = get_logger()

    from yt_clipper.services.id_parser import load_urls_from_file

    targets = list(urls)
    if file_path:
        targets.extend(u for u in load_urls_from_file(file_path) if u not in targets)
    if not targets:
        log.error("No URLs provided. Pass URLs as arguments or use --file.")
        sys.exit(EXIT_ERROR)

    options = AcquireOptions(
        download_video=video,
        download_audio=audio,
        download_subtitles=subtitles,
        download_thumbnail=thumbnail,
    )

    from yt_clipper.core.pipeline import MediaAcquisitionPipeline, acquire_many

    pipeline = MediaAcquisitionPipeline(settings)
    batch = asyncio.run(acquire_many(targets, options, pipeline))

    for result in batch.results:
        click.echo(result.model_dump_json(indent=2))
        if result.warning:
            log.warning("%s: %s", result.source_url, result.warning)
    for url, error in batch.errors.items():
        log.error("Failed to acquire %s: %s", url, error)

    if summary_path:
        write_model_json(batch, summary_path)
        log.info("Summary written to %s", summary_path)

    sys.exit(_exit_code(batch.total, batch.failed, strict))


@cli.command()
@click.argument("video", type=click.Path(path_type=Path))
@click.option("--platform-auto/--no-platform-auto", default=True, help="Try YouTube auto-captions.")
@_common_options
def subtitles(video, platform_auto, log_file, **kwargs):
    """Resolve subtitles for VIDEO into <stem>.vtt."""
    settings = _startup(log_file, **kwargs)
    log = get_logger()

    from yt_clipper.services.gateway import ToolGateway
    from yt_clipper.services.subtitles import SubtitleSynthesisEngine

    engine = SubtitleSynthesisEngine(ToolGateway.from_settings(settings), settings)
    try:
        document = asyncio.run(engine.resolve(video, ResolveOptions(try_platform_auto=platform_auto)))
    except ClipperError as exc:
        log.error("%s", exc)
        sys.exit(EXIT_ERROR)

    log.info("%d cues (%s)", len(document.cues), document.origin.value)
    click.echo(str(document.path))
    sys.exit(EXIT_OK)


def _transformer(settings: ClipperSettings):
    from yt_clipper.services.gateway import ToolGateway
    from yt_clipper.services.transform import VideoTransformPipeline

    return VideoTransformPipeline(ToolGateway.from_settings(settings), settings)


@cli.command()
@click.argument("video", type=click.Path(path_type=Path))
@_common_options
def vertical(video, log_file, **kwargs):
    """Crop VIDEO to 9:16 as <stem>_vertical<ext>."""
    settings = _startup(log_file, **kwargs)
    _finish_transform(asyncio.run(_transformer(settings).to_vertical(video)))


@cli.command()
@click.argument("video", type=click.Path(path_type=Path))
@click.argument("subtitle_file", type=click.Path(path_type=Path))
@click.option("--out", "output_path", type=click.Path(path_type=Path), default=None, help="Output file.")
@click.option("--style", default="default", help="social, caption, simple, modern, elegant or default.")
@_common_options
def burn(video, subtitle_file, output_path, style, log_file, **kwargs):
    """Burn SUBTITLE_FILE into VIDEO."""
    settings = _startup(log_file, **kwargs)
    _finish_transform(
        asyncio.run(_transformer(settings).burn_subtitles(video, subtitle_file, output_path, style))
    )


@cli.command("extract-audio")
@click.argument("video", type=click.Path(path_type=Path))
@click.option("--dest", type=click.Path(path_type=Path), default=None, help="Output audio file.")
@_common_options
def extract_audio(video, dest, log_file, **kwargs):
    """Extract the audio track of VIDEO."""
    settings = _startup(log_file, **kwargs)
    _finish_transform(asyncio.run(_transformer(settings).extract_audio(video, dest)))


@cli.command()
@click.option("--days", type=float, default=None, help="Age threshold in days.")
@_common_options
def cleanup(days, log_file, **kwargs):
    """Remove stale working directories."""
    settings = _build_settings(**kwargs)
    setup_logging(verbose=settings.verbose, jsonl_path=log_file)
    removed = Workspace(settings.downloads_dir).cleanup(
        days if days is not None else settings.stale_workspace_days
    )
    for path in removed:
        click.echo(str(path))
    sys.exit(EXIT_OK)


if __name__ == "__main__":
    cli()
