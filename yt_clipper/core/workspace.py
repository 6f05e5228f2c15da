# Copyright (c) 2026 Pointmatic
#
# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.

"""Per-acquisition working directories."""

from __future__ import annotations

import logging
import shutil
import time
from pathlib import Path

from yt_clipper.core.errors import WorkspaceError

logger = logging.getLogger("yt_clipper")

WORKDIR_PREFIX = "youtube_"


class Workspace:
    """Creates and prunes timestamp-named working directories under ``root``.

    Each call to ``create`` returns a directory no other call has returned,
    so concurrent acquisitions never share files.
    """

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def create(self) -> Path:
        """Create a fresh ``youtube_<epoch-ms>`` directory.

        Raises:
            WorkspaceError: if the directory cannot be created.
        """
        stamp = int(time.time() * 1000)
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            while True:
                candidate = self.root / f"{WORKDIR_PREFIX}{stamp}"
                try:
                    candidate.mkdir()
                except FileExistsError:
                    stamp += 1
                    continue
                logger.debug("Created working directory %s", candidate)
                return candidate
        except OSError as exc:
            raise WorkspaceError(f"Could not create working directory under {self.root}: {exc}") from exc

    def cleanup(self, max_age_days: float) -> list[Path]:
        """Delete working directories older than ``max_age_days``.

        Meant to run once at process start. Returns the removed paths.
        """
        if not self.root.is_dir():
            return []
        cutoff = time.time() - max_age_days * 86400
        removed: list[Path] = []
        for entry in sorted(self.root.iterdir()):
            if not entry.is_dir() or not entry.name.startswith(WORKDIR_PREFIX):
                continue
            try:
                if entry.stat().st_mtime >= cutoff:
                    continue
                shutil.rmtree(entry)
            except OSError as exc:
                logger.warning("Failed to remove stale working directory %s: %s", entry, exc)
                continue
            removed.append(entry)
        if removed:
            logger.info("Removed %d stale working director%s", len(removed), "y" if len(removed) == 1 else "ies")
        return removed
