# Copyright (c) 2026 Pointmatic
#
# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.

"""Console logging through rich, plus an optional JSONL event file."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler


LOGGER_NAME = "yt_clipper"

# Per-record fields an acquisition attaches through log_event.
EVENT_FIELDS = ("video_id", "stage", "event", "details", "error")

# Libraries whose INFO chatter only matters when debugging.
_NOISY_LOGGERS = ("urllib3", "asyncio")

_console = Console(stderr=True)


class JsonlFormatter(logging.Formatter):
    """One JSON object per record: level, timestamp, event fields, message."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
        }
        for field in EVENT_FIELDS:
            entry[field] = getattr(record, field, None)

        message = record.getMessage()
        if message:
            entry["message"] = message
        if record.exc_info:
            entry["traceback"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str, ensure_ascii=False)


class JsonlFileHandler(logging.FileHandler):
    """Appends JsonlFormatter output to ``path``, creating parent dirs."""

    def __init__(self, path: Path) -> None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        super().__init__(str(path), mode="a", encoding="utf-8")
        self.setFormatter(JsonlFormatter())


def setup_logging(*, verbose: bool = False, jsonl_path: Path | None = None) -> logging.Logger:
    """Configure and return the yt_clipper logger.

    Safe to call more than once: previous handlers are closed and replaced.

    Args:
        verbose: DEBUG level, which includes every tool command line.
        jsonl_path: Also append structured records to this file.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
    logger.setLevel(level)
    logger.propagate = False

    console_handler = RichHandler(
        console=_console,
        level=level,
        show_time=verbose,
        show_path=verbose,
        rich_tracebacks=True,
        # tool stderr and file names may contain [brackets]
        markup=False,
    )
    logger.addHandler(console_handler)

    if jsonl_path is not None:
        file_handler = JsonlFileHandler(jsonl_path)
        file_handler.setLevel(logging.DEBUG)
        logger.addHandler(file_handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if verbose else logging.WARNING)

    return logger


def get_logger() -> logging.Logger:
    return logging.getLogger(LOGGER_NAME)


def log_event(
    level: int,
    message: str,
    *,
    video_id: str | None = None,
    stage: str | None = None,
    event: str | None = None,
    details: str | None = None,
    error: str | None = None,
) -> None:
    """Log ``message`` with acquisition event fields attached.

    ``stage`` names the step (``workspace``, ``video``, ``subtitle``, ...),
    ``event`` what happened in it (``created``, ``downloaded``, ``missing``).
    """
    fields = {
        "video_id": video_id,
        "stage": stage,
        "event": event,
        "details": details,
        "error": error,
    }
    get_logger().log(level, message, extra=fields)
