"""Video identifier extraction from URLs and filenames."""

from __future__ import annotations

import re
from pathlib import Path
from urllib.parse import parse_qs, urlparse

_VIDEO_ID_RE = re.compile(r"^[A-Za-z0-9_-]{11}$")
_ID_TOKEN_RE = re.compile(r"[A-Za-z0-9_-]{11}")


def _is_valid_video_id(candidate: str) -> bool:
    """Check if a string looks like a valid YouTube video ID."""
    return bool(_VIDEO_ID_RE.match(candidate))


def watch_url(video_id: str) -> str:
    return f"https://www.youtube.com/watch?v={video_id}"


def parse_video_id(url: str) -> str | None:
    """Extract a YouTube video ID from a URL.

    ``youtu.be/<id>`` links use the first path segment; every other URL
    shape uses the ``v`` query parameter. ``/shorts/`` and ``/embed/`` paths
    are accepted as well. Returns None if no valid ID can be found.
    """
    text = url.strip()
    if not text:
        return None

    try:
        parsed = urlparse(text)
    except ValueError:
        return None

    host = (parsed.hostname or "").lower().removeprefix("www.")

    if host == "youtu.be":
        candidate = parsed.path.lstrip("/").split("/")[0]
        return candidate if _is_valid_video_id(candidate) else None

    candidates = parse_qs(parsed.query).get("v", [])
    if candidates and _is_valid_video_id(candidates[0]):
        return candidates[0]

    for prefix in ("/shorts/", "/embed/"):
        if parsed.path.startswith(prefix):
            candidate = parsed.path.removeprefix(prefix).split("/")[0]
            if _is_valid_video_id(candidate):
                return candidate

    return None


def find_id_token(filename: str) -> str | None:
    """Return the first 11-character ID-shaped token in a filename."""
    match = _ID_TOKEN_RE.search(filename)
    return match.group(0) if match else None


def load_urls_from_file(path: Path) -> list[str]:
    """Read one URL per line, skipping blanks and ``#`` comments.

    Duplicates are dropped, first occurrence wins.
    """
    seen: set[str] = set()
    urls: list[str] = []
    with open(path, encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if line and not line.startswith("#") and line not in seen:
                seen.add(line)
                urls.append(line)
    return urls
