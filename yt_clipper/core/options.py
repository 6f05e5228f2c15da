"""Settings and per-operation option models for yt-clipper."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel
from pydantic_settings import BaseSettings, SettingsConfigDict, PydanticBaseSettingsSource
from pydantic_settings import YamlConfigSettingsSource


def _default_data_dir() -> Path:
    return Path.home() / ".yt_clipper"


class ClipperSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="YT_CLIPPER_",
        yaml_file="yt_clipper.yaml",
        yaml_file_encoding="utf-8",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            YamlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )

    downloads_dir: Path = _default_data_dir() / "downloads"
    export_dir: Path = Path.home() / "Desktop" / "ytclips"
    bin_dir: Path = _default_data_dir() / "bin"
    downloader: str = "yt-dlp"
    ffmpeg: str = "ffmpeg"
    ffprobe: str = "ffprobe"
    # None means a hung tool blocks its task until it exits.
    tool_timeout: float | None = None
    allow_pip_install: bool = True
    subtitle_language: str = "en"
    video_format: str = "mp4"
    audio_format: str = "mp3"
    stale_workspace_days: float = 7.0
    http_timeout: float = 10.0
    http_retries: int = 3
    workers: int = 3
    verbose: bool = False


class AcquireOptions(BaseModel):
    """Which assets an acquisition should try to produce."""

    download_video: bool = True
    download_audio: bool = True
    download_subtitles: bool = True
    download_thumbnail: bool = True

    @property
    def wants_media(self) -> bool:
        return self.download_video or self.download_audio or self.download_subtitles


class ResolveOptions(BaseModel):
    """Options for subtitle resolution."""

    try_platform_auto: bool = True
