"""
Git adapter — clone repositories and sync submodules.

Uses the git CLI through a ``CommandRunner``, never a library binding.
"""

from __future__ import annotations

import logging
from pathlib import Path

from dotstrap.adapters.base import CommandResult, CommandRunner
from dotstrap.core.context import HostContext

logger = logging.getLogger(__name__)

# Status prefixes that need a `submodule update`
_UNSYNCED_PREFIXES = ("-", "+", "U")


class GitAdapter:
    """Git operations used by plugin and submodule steps."""

    def __init__(self, runner: CommandRunner, context: HostContext):
        self._runner = runner
        self._context = context

    # ── Operations ──────────────────────────────────────────────

    def clone(self, url: str, dest: Path) -> CommandResult:
        """Clone ``url`` into ``dest``."""
        return self._git(
            ["clone", url, str(dest)],
            cwd=str(dest.parent) if dest.parent.is_dir() else None,
        )

    def submodule_update(self, repo_dir: Path) -> CommandResult:
        """Initialize and update all submodules, recursively."""
        return self._git(
            ["submodule", "update", "--init", "--recursive"],
            cwd=str(repo_dir),
        )

    def unsynced_submodules(self, repo_dir: Path) -> list[str] | None:
        """Paths of submodules not checked out at the recorded commit.

        ``git submodule status`` prefixes uninitialized entries with
        ``-``, a checkout that differs from the superproject's commit
        with ``+``, and merge conflicts with ``U``. Returns None when the
        status query itself fails.
        """
        result = self._git(["submodule", "status", "--recursive"], cwd=str(repo_dir))
        if not result.ok:
            logger.debug("submodule status failed: %s", result.describe())
            return None

        unsynced: list[str] = []
        for line in result.stdout.splitlines():
            if line[:1] not in _UNSYNCED_PREFIXES:
                continue
            parts = line[1:].split()
            if len(parts) >= 2:
                unsynced.append(parts[1])
        return unsynced

    # ── Helpers ─────────────────────────────────────────────────

    def _git(self, args: list[str], cwd: str | None = None) -> CommandResult:
        return self._runner.run(
            ["git", *args],
            cwd=cwd,
            env=self._context.command_env(),
        )
