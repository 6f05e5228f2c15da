"""Atomic output file writing (VTT, JSON)."""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path

from pydantic import BaseModel


def write_text(dest: Path, content: str) -> Path:
    """Write text atomically. Returns the written file path."""
    _atomic_write(dest, lambda f: f.write(content))
    return dest


def write_model_json(model: BaseModel, dest: Path) -> Path:
    """Write a pydantic model as indented JSON. Returns the written file path."""
    data = model.model_dump(mode="json")

    def _dump(f) -> None:
        json.dump(data, f, indent=2, default=str, ensure_ascii=False)
        f.write("\n")

    _atomic_write(dest, _dump)
    return dest


def _atomic_write(dest: Path, write) -> None:
    """Write to a temp file beside ``dest``, then rename over it."""
    dest = Path(dest)
    dest.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(
        dir=dest.parent, suffix=".tmp", prefix=".yt_clipper_"
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            write(f)
        os.replace(tmp_path, dest)
    except BaseException:
        os.unlink(tmp_path)
        raise
