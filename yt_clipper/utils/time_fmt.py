"""WebVTT timestamp formatting and parsing helpers."""

from __future__ import annotations

import math


def seconds_to_vtt(seconds: float) -> str:
    """Convert seconds to WebVTT timestamp: HH:MM:SS.mmm

    Fractional milliseconds are truncated, never rounded up.
    """
    seconds = max(0.0, seconds)
    # round() first so 1.001 * 1000 == 1000.9999... still floors to 1001
    total_ms = math.floor(round(seconds * 1000, 6))
    h, rem = divmod(total_ms, 3_600_000)
    m, rem = divmod(rem, 60_000)
    s, ms = divmod(rem, 1000)
    return f"{h:02d}:{m:02d}:{s:02d}.{ms:03d}"


def vtt_to_seconds(timestamp: str) -> float:
    """Convert ``HH:MM:SS.mmm`` (or ``MM:SS.mmm``) to seconds.

    SRT-style comma decimals are accepted. Raises ValueError on junk.
    """
    parts = timestamp.strip().replace(",", ".").split(":")
    if len(parts) == 3:
        hours, minutes, secs = parts
    elif len(parts) == 2:
        hours = "0"
        minutes, secs = parts
    else:
        raise ValueError(f"Invalid timestamp: {timestamp!r}")
    return int(hours) * 3600 + int(minutes) * 60 + float(secs)
