# Copyright (c) 2026 Pointmatic
#
# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.

"""Exception hierarchy shared across yt-clipper services."""

from __future__ import annotations


class ClipperError(Exception):
    """Base class for yt-clipper errors."""


class WorkspaceError(ClipperError):
    """Raised when a working directory cannot be created."""


class AcquisitionError(ClipperError):
    """Raised when an acquisition cannot produce any result at all."""


class AssetNotFoundError(ClipperError):
    """Raised when an expected input file is missing."""


class ToolUnavailableError(ClipperError):
    """Raised when an external tool cannot be located or installed."""
