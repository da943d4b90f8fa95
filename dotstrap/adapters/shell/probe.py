"""
Command probe — "is executable X available on PATH".

The universal precondition check: tool steps, build verification, and
the privilege probe all ask this one question.
"""

from __future__ import annotations

import logging
import os
import shutil

logger = logging.getLogger(__name__)


class CommandProbe:
    """Resolve executables against an explicit PATH string.

    The PATH is passed in rather than read from ``os.environ`` at call
    time, so a probe always answers for the environment the steps were
    built against.
    """

    def __init__(self, path: str | None = None):
        self._path = path if path is not None else os.environ.get("PATH", os.defpath)

    @property
    def path(self) -> str:
        return self._path

    def which(self, name: str) -> str | None:
        """Full path of ``name``, or None when it is not on PATH."""
        return shutil.which(name, path=self._path)

    def exists(self, name: str) -> bool:
        found = self.which(name)
        logger.debug("probe %s → %s", name, found or "not found")
        return found is not None

    def __repr__(self) -> str:
        return f"<CommandProbe entries={len(self._path.split(os.pathsep))}>"
