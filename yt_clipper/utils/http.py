"""Small blocking HTTP helpers built on requests."""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

import requests

from yt_clipper.utils.retry import TransientHTTPError, is_retryable_http_status, retry

logger = logging.getLogger("yt_clipper")

_CHUNK_SIZE = 1 << 16


def _raise_for_status(response: requests.Response) -> None:
    if is_retryable_http_status(response.status_code):
        raise TransientHTTPError(
            f"HTTP {response.status_code} for {response.url}", response=response
        )
    response.raise_for_status()


@retry()
def get_json(url: str, *, params: dict | None = None, timeout: float = 10.0) -> dict:
    """GET ``url`` and decode a JSON object body."""
    response = requests.get(url, params=params, timeout=timeout)
    _raise_for_status(response)
    data = response.json()
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object from {url}")
    return data


@retry()
def download_file(url: str, dest: Path, *, timeout: float = 10.0) -> Path:
    """Stream ``url`` into ``dest``. A partial file is removed on failure."""
    dest.parent.mkdir(parents=True, exist_ok=True)
    # unique per call: concurrent downloads of the same dest must not share it
    fd, tmp_path = tempfile.mkstemp(dir=dest.parent, suffix=".part", prefix=f".{dest.name}.")
    try:
        with os.fdopen(fd, "wb") as f:
            with requests.get(url, stream=True, timeout=timeout) as response:
                _raise_for_status(response)
                for chunk in response.iter_content(chunk_size=_CHUNK_SIZE):
                    if chunk:
                        f.write(chunk)
        os.replace(tmp_path, dest)
    except BaseException:
        os.unlink(tmp_path)
        raise
    logger.debug("Downloaded %s -> %s", url, dest)
    return dest
