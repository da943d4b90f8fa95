"""
Git steps — plugin clones and submodule sync.
"""

from __future__ import annotations

import logging
from pathlib import Path

from dotstrap.adapters.vcs.git import GitAdapter
from dotstrap.core.models.action import ActionResult
from dotstrap.core.models.step import PreconditionError, Step, StepKind, StepState

logger = logging.getLogger(__name__)


def clone_step(
    name: str,
    url: str,
    dest: Path,
    git: GitAdapter,
    *,
    fatal: bool = False,
    requires: tuple[str, ...] = (),
) -> Step:
    """Clone ``url`` into ``dest`` unless ``dest`` already exists."""

    def act() -> ActionResult:
        dest.parent.mkdir(parents=True, exist_ok=True)
        return ActionResult.from_command(
            git.clone(url, dest), output=f"{name} cloned to {dest}"
        )

    return Step(
        name=f"plugin:{name}",
        check=lambda: StepState.SATISFIED if dest.is_dir() else StepState.MISSING,
        act=act,
        verify=dest.is_dir,
        fatal=fatal,
        kind=StepKind.PROBE,
        label=name,
        requires=requires,
    )


def submodule_step(repo_dir: Path, git: GitAdapter, *, fatal: bool = True) -> Step:
    """Initialize and update the repository's submodules recursively."""
    gitmodules = repo_dir / ".gitmodules"

    def synced() -> bool:
        if not gitmodules.is_file():
            return False
        unsynced = git.unsynced_submodules(repo_dir)
        if unsynced:
            logger.debug("Submodules out of sync: %s", ", ".join(unsynced))
        return unsynced == []

    def act() -> ActionResult:
        if not gitmodules.is_file():
            raise PreconditionError(
                f".gitmodules not found in {repo_dir}. This repo should have submodules."
            )
        logger.info("Initializing git submodules...")
        return ActionResult.from_command(
            git.submodule_update(repo_dir), output="Git submodules initialized"
        )

    return Step(
        name="submodules",
        check=lambda: StepState.SATISFIED if synced() else StepState.MISSING,
        act=act,
        verify=synced,
        fatal=fatal,
        kind=StepKind.PROBE,
        label="Git submodules",
    )
