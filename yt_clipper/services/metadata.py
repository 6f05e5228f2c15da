"""Metadata retrieval (yt-dlp JSON dump + oEmbed fallback)."""

from __future__ import annotations

import json
import logging
import re
from datetime import date

from yt_clipper.core.models import Metadata
from yt_clipper.services.gateway import DOWNLOADER, ToolGateway
from yt_clipper.services.id_parser import watch_url
from yt_clipper.utils.http import get_json

logger = logging.getLogger("yt_clipper")

OEMBED_URL = "https://www.youtube.com/oembed"
THUMBNAIL_URL = "https://img.youtube.com/vi/{video_id}/maxresdefault.jpg"

_FORBIDDEN_CHARS_RE = re.compile(r'[/\\?%*:|"<>]')
MAX_TITLE_LENGTH = 100


class MetadataError(Exception):
    """Raised when metadata extraction fails."""


def sanitize_title(title: str) -> str:
    """Make a title usable as a file base name.

    Each of ``/ \\ ? % * : | " < >`` becomes ``_``; the result is cut to
    100 characters.
    """
    return _FORBIDDEN_CHARS_RE.sub("_", title)[:MAX_TITLE_LENGTH]


async def fetch_metadata(gateway: ToolGateway, url: str) -> Metadata:
    """Ask the downloader for the video's info JSON."""
    result = await gateway.run(
        DOWNLOADER,
        [url, "--dump-json", "--skip-download", "--no-warnings", "--no-playlist"],
    )
    if not result.exit_succeeded:
        raise MetadataError(f"Failed to extract metadata for {url}: {result.stderr.strip()}")

    try:
        info = json.loads(result.stdout.strip().splitlines()[0])
    except (IndexError, json.JSONDecodeError) as exc:
        raise MetadataError(f"Unreadable metadata for {url}") from exc
    if not isinstance(info, dict):
        raise MetadataError(f"No metadata returned for {url}")

    return _map_yt_dlp_info(url, info)


def _map_yt_dlp_info(url: str, info: dict) -> Metadata:
    """Map a yt-dlp info dict to the Metadata model."""
    upload_date_raw = info.get("upload_date")
    if upload_date_raw and len(upload_date_raw) == 8 and upload_date_raw.isdigit():
        upload_date = f"{upload_date_raw[:4]}-{upload_date_raw[4:6]}-{upload_date_raw[6:8]}"
    elif upload_date_raw:
        upload_date = upload_date_raw
    else:
        upload_date = date.today().isoformat()

    return Metadata(
        video_id=info.get("id"),
        source_url=url,
        title=info.get("title") or info.get("fulltitle") or "Unknown Title",
        channel=info.get("channel") or info.get("uploader") or "Unknown",
        upload_date=upload_date,
        duration_seconds=info.get("duration") or 0,
        description=info.get("description") or "",
        metadata_source="yt-dlp",
    )


def fetch_oembed_metadata(video_id: str, url: str, *, timeout: float = 10.0, retries: int = 3) -> Metadata:
    """Title and author from the public oEmbed endpoint. Blocking.

    Raises:
        MetadataError: if the endpoint cannot be reached or answers badly.
    """
    try:
        data = get_json(
            OEMBED_URL,
            params={"url": watch_url(video_id), "format": "json"},
            timeout=timeout,
            retries=retries,
        )
    except Exception as exc:
        raise MetadataError(f"oEmbed lookup failed for {video_id}: {exc}") from exc

    return Metadata(
        video_id=video_id,
        source_url=url,
        title=data.get("title") or "Unknown Title",
        channel=data.get("author_name") or "Unknown Channel",
        metadata_source="oembed",
    )


def thumbnail_url(video_id: str) -> str:
    return THUMBNAIL_URL.format(video_id=video_id)
