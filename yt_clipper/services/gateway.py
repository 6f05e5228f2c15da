# Copyright (c) 2026 Pointmatic
#
# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.

"""Out-of-process invocation of the downloader and transcoder tools."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Sequence

from yt_clipper.core.models import ToolInvocationResult
from yt_clipper.core.options import ClipperSettings

logger = logging.getLogger("yt_clipper")

DOWNLOADER = "yt-dlp"
TRANSCODER = "ffmpeg"
PROBER = "ffprobe"


class ToolGateway:
    """Runs named external tools as subprocesses.

    A tool name maps to a command prefix (``["yt-dlp"]``,
    ``["/usr/bin/python3", "-m", "yt_dlp"]``, ...). Unknown names run as-is.

    ``run`` never raises for a failing tool: a nonzero exit, a binary that
    cannot be spawned and a timeout all come back as
    ``exit_succeeded=False`` with the reason in ``stderr``. Retrying is the
    caller's business.

    Args:
        commands: Initial tool name -> command prefix mapping.
        timeout: Seconds before a running tool is killed. None waits forever.
    """

    def __init__(
        self,
        commands: dict[str, Sequence[str]] | None = None,
        timeout: float | None = None,
    ) -> None:
        self._commands: dict[str, list[str]] = {
            name: list(prefix) for name, prefix in (commands or {}).items()
        }
        self._timeout = timeout

    @classmethod
    def from_settings(cls, settings: ClipperSettings) -> ToolGateway:
        return cls(
            commands={
                DOWNLOADER: [settings.downloader],
                TRANSCODER: [settings.ffmpeg],
                PROBER: [settings.ffprobe],
            },
            timeout=settings.tool_timeout,
        )

    @property
    def timeout(self) -> float | None:
        return self._timeout

    def register(self, tool_name: str, command: Sequence[str]) -> None:
        """Point ``tool_name`` at a different command prefix."""
        self._commands[tool_name] = list(command)

    def command_for(self, tool_name: str) -> list[str]:
        return list(self._commands.get(tool_name, [tool_name]))

    async def run(self, tool_name: str, args: Sequence[str]) -> ToolInvocationResult:
        """Run a tool to completion and capture its output."""
        cmd = self.command_for(tool_name) + [str(a) for a in args]
        logger.debug("Running: %s", " ".join(cmd))

        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            logger.debug("Could not start %s: %s", tool_name, exc)
            return ToolInvocationResult(
                exit_succeeded=False,
                stderr=f"{tool_name} could not be started: {exc}",
            )

        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), self._timeout)
        except asyncio.TimeoutError:
            # the process may have exited on its own after the deadline
            with contextlib.suppress(ProcessLookupError):
                proc.kill()
            await proc.wait()
            logger.warning("%s timed out after %ss", tool_name, self._timeout)
            return ToolInvocationResult(
                exit_succeeded=False,
                stderr=f"{tool_name} timed out after {self._timeout}s",
            )

        result = ToolInvocationResult(
            exit_succeeded=proc.returncode == 0,
            stdout=stdout.decode("utf-8", errors="replace"),
            stderr=stderr.decode("utf-8", errors="replace"),
        )
        if not result.exit_succeeded:
            logger.debug(
                "%s exited with code %s: %s",
                tool_name,
                proc.returncode,
                result.stderr.strip(),
            )
        return result

    async def probe(self, tool_name: str, version_args: Sequence[str] = ("--version",)) -> bool:
        """Return True if ``tool_name`` can be invoked at all."""
        result = await self.run(tool_name, version_args)
        return result.exit_succeeded
