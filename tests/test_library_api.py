"""Tests for the yt_clipper public library API."""

from pathlib import Path
from unittest.mock import AsyncMock, patch

import yt_clipper
from yt_clipper import (
    AcquireOptions,
    AcquisitionResult,
    ClipperSettings,
    TransformResult,
    acquire,
    burn_subtitles,
    extract_audio,
    resolve_subtitles,
    to_vertical,
)


# --- Exports ---


class TestExports:
    def test_version_exported(self):
        assert isinstance(yt_clipper.__version__, str)

    def test_all_names_resolve(self):
        for name in yt_clipper.__all__:
            assert hasattr(yt_clipper, name), name


# --- wrappers ---


class TestAcquire:
    @patch("yt_clipper.core.pipeline.MediaAcquisitionPipeline.acquire", new_callable=AsyncMock)
    def test_delegates_to_pipeline(self, mock_acquire, tmp_path):
        expected = AcquisitionResult(title="t", source_url="u", working_directory=tmp_path)
        mock_acquire.return_value = expected
        options = AcquireOptions(download_audio=False)

        result = acquire("https://youtu.be/dQw4w9WgXcQ", options, ClipperSettings(downloads_dir=tmp_path))

        assert result is expected
        assert mock_acquire.call_args.args == ("https://youtu.be/dQw4w9WgXcQ", options)


class TestResolveSubtitles:
    def test_reuses_existing_file(self, tmp_path):
        video = tmp_path / "clip.mp4"
        video.write_bytes(b"\x00")
        (tmp_path / "clip.vtt").write_text("WEBVTT\n\n00:00:00.000 --> 00:00:01.000\nhi\n", encoding="utf-8")

        doc = resolve_subtitles(str(video))

        assert doc.origin.value == "reused"
        assert doc.cues[0].text == "hi"


class TestTransforms:
    @patch("yt_clipper.services.transform.VideoTransformPipeline.to_vertical", new_callable=AsyncMock)
    def test_to_vertical_accepts_str(self, mock_vertical):
        mock_vertical.return_value = TransformResult(success=True, output_path=Path("/v/c_vertical.mp4"))
        assert to_vertical("/v/c.mp4").success is True
        assert mock_vertical.call_args.args == (Path("/v/c.mp4"),)

    @patch("yt_clipper.services.transform.VideoTransformPipeline.burn_subtitles", new_callable=AsyncMock)
    def test_burn_subtitles(self, mock_burn):
        mock_burn.return_value = TransformResult(success=True)
        burn_subtitles("/v/c.mp4", "/v/c.vtt", style="caption")
        assert mock_burn.call_args.args == (Path("/v/c.mp4"), Path("/v/c.vtt"), None, "caption")

    def test_missing_input_reported_not_raised(self, tmp_path):
        result = extract_audio(tmp_path / "missing.mp4")
        assert result.success is False
        assert "File not found" in result.error
