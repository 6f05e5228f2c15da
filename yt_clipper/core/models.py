# Copyright (c) 2026 Pointmatic
#
# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.

"""Pydantic data models for yt-clipper."""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, model_validator


class AssetKind(str, Enum):
    VIDEO = "video"
    AUDIO = "audio"
    SUBTITLE = "subtitle"
    THUMBNAIL = "thumbnail"


class SubtitleOrigin(str, Enum):
    """Which resolution strategy produced a SubtitleDocument."""

    REUSED = "reused"
    CONVERTED = "converted"
    EMBEDDED_EXTRACTED = "embedded-extracted"
    PLATFORM_AUTO = "platform-auto"
    SYNTHESIZED_PLACEHOLDER = "synthesized-placeholder"


class Metadata(BaseModel):
    video_id: str | None = None
    source_url: str
    title: str = "Unknown Title"
    channel: str | None = None
    upload_date: str | None = None
    duration_seconds: float | None = None
    description: str | None = None
    metadata_source: str


class MediaAsset(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: AssetKind
    path: Path | None = None
    present: bool = False


class AcquisitionResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    video_id: str | None = None
    title: str
    channel: str | None = None
    duration_seconds: float | None = None
    upload_date: str | None = None
    description: str | None = None
    source_url: str
    working_directory: Path
    assets: list[MediaAsset] = []
    warning: str | None = None

    def asset(self, kind: AssetKind) -> Path | None:
        """Return the path of the present asset of ``kind``, if any."""
        for item in self.assets:
            if item.kind == kind and item.present:
                return item.path
        return None


class BatchResult(BaseModel):
    total: int
    succeeded: int
    failed: int
    results: list[AcquisitionResult]
    errors: dict[str, str] = {}


class SubtitleCue(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    start_seconds: float = Field(ge=0)
    end_seconds: float
    text: str = Field(min_length=1)

    @model_validator(mode="after")
    def _end_after_start(self) -> SubtitleCue:
        if self.end_seconds <= self.start_seconds:
            raise ValueError(
                f"end_seconds ({self.end_seconds}) must be greater than "
                f"start_seconds ({self.start_seconds})"
            )
        return self


class SubtitleDocument(BaseModel):
    model_config = ConfigDict(frozen=True)

    cues: list[SubtitleCue]
    origin: SubtitleOrigin
    path: Path | None = None


class ToolInvocationResult(BaseModel):
    exit_succeeded: bool
    stdout: str = ""
    stderr: str = ""


class TransformResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    success: bool
    output_path: Path | None = None
    error: str | None = None
    warning: str | None = None


class VideoInfo(BaseModel):
    width: int
    height: int
    duration: float = 0.0


class CropBox(BaseModel):
    width: int
    height: int
    x: int
    y: int

    @property
    def filter(self) -> str:
        """ffmpeg crop filter expression."""
        return f"crop={self.width}:{self.height}:{self.x}:{self.y}"
