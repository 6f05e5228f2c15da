# Copyright (c) 2026 Pointmatic
#
# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.

"""Conversion between cue sequences and WebVTT text."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from pathlib import Path

from pydantic import ValidationError

from yt_clipper.core.models import SubtitleCue
from yt_clipper.core.writer import write_text
from yt_clipper.utils.time_fmt import seconds_to_vtt, vtt_to_seconds

logger = logging.getLogger("yt_clipper")

HEADER = "WEBVTT"
ARROW = "-->"

_INDEX_LINE_RE = re.compile(r"^\d+$")


def serialize(cues: Iterable[SubtitleCue]) -> str:
    """Render cues as a WebVTT document."""
    parts = [HEADER, ""]
    for cue in cues:
        parts.append(cue.id)
        parts.append(f"{seconds_to_vtt(cue.start_seconds)} {ARROW} {seconds_to_vtt(cue.end_seconds)}")
        parts.append(cue.text)
        parts.append("")
    return "\n".join(parts) + "\n"


def parse(text: str) -> list[SubtitleCue]:
    """Parse WebVTT (or SRT-like) text into cues, keeping input order.

    A line holding ``-->`` opens a cue; following non-blank lines are its
    text, joined by single spaces; a blank line or end of input closes it.
    Bare numeric lines are cue indices and are ignored. Cues with no text or
    unusable timing are dropped. Ids are renumbered from ``"0"``.
    """
    cues: list[SubtitleCue] = []
    current: dict | None = None

    def _close() -> None:
        nonlocal current
        if current is not None and current["text"]:
            try:
                cues.append(
                    SubtitleCue(
                        id=str(len(cues)),
                        start_seconds=current["start"],
                        end_seconds=current["end"],
                        text=current["text"],
                    )
                )
            except ValidationError:
                logger.debug("Dropping invalid cue at %.3fs", current["start"])
        current = None

    for raw_line in text.splitlines():
        line = raw_line.lstrip("\ufeff").strip()

        if not line:
            _close()
            continue
        if line.startswith(HEADER) and current is None and not cues:
            continue

        if ARROW in line:
            _close()
            start_raw, _, end_raw = line.partition(ARROW)
            # end timestamp may be followed by cue settings ("align:start ...")
            end_tokens = end_raw.split()
            try:
                start = vtt_to_seconds(start_raw)
                end = vtt_to_seconds(end_tokens[0] if end_tokens else "")
            except ValueError:
                logger.debug("Skipping unparsable timing line: %s", line)
                continue
            current = {"start": start, "end": end, "text": ""}
            continue

        if current is None or _INDEX_LINE_RE.match(line):
            continue

        current["text"] = f"{current['text']} {line}" if current["text"] else line

    _close()
    return cues


def read_vtt(path: Path) -> list[SubtitleCue]:
    return parse(Path(path).read_text(encoding="utf-8", errors="replace"))


def write_vtt(cues: Iterable[SubtitleCue], path: Path) -> Path:
    return write_text(Path(path), serialize(cues))
