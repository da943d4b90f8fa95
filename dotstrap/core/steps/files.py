"""
File install step — copy a config file into place, backing up first.

    target absent             → copy, no backup
    target equals source      → skip (no needless backups on re-runs)
    target differs            → copy target to TARGET.backup.YYYYmmdd_HHMMSS,
                                then copy source over it
                                (.1, .2, ... when that name is taken)

Backups are never cleaned up; they are the manual recovery path.
Concurrent runs against one target are not supported (no locking).
"""

from __future__ import annotations

import logging
import os
import shutil
from datetime import datetime
from pathlib import Path
from typing import Callable

from dotstrap.core.models.action import ActionResult
from dotstrap.core.models.step import PreconditionError, Step, StepKind, StepState

logger = logging.getLogger(__name__)

# Second precision, sorts lexicographically
BACKUP_TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"


def backup_path(target: Path, when: datetime) -> Path:
    """``<target>.backup.<timestamp>`` next to ``target``."""
    return target.with_name(f"{target.name}.backup.{when.strftime(BACKUP_TIMESTAMP_FORMAT)}")


def free_backup_path(target: Path, when: datetime) -> Path:
    """First of ``backup_path``, ``.1``, ``.2``, ... that does not exist yet."""
    base = backup_path(target, when)
    candidate, n = base, 0
    while candidate.exists():
        n += 1
        candidate = base.with_name(f"{base.name}.{n}")
    return candidate


def same_content(source: Path, target: Path) -> bool:
    """Byte-equality of two files; False if either is unreadable."""
    if not (source.is_file() and target.is_file()):
        return False
    try:
        return source.read_bytes() == target.read_bytes()
    except OSError:
        return False


def file_install_step(
    source: Path,
    target: Path,
    *,
    mode: int = 0o644,
    fatal: bool = True,
    clock: Callable[[], datetime] = datetime.now,
    requires: tuple[str, ...] = (),
) -> Step:
    """Install ``source`` at ``target`` with ``mode``."""

    def check() -> StepState:
        return StepState.SATISFIED if same_content(source, target) else StepState.MISSING

    def act() -> ActionResult:
        if not source.is_file():
            raise PreconditionError(f"{source.name} not found in {source.parent}")

        backup: Path | None = None
        try:
            if target.exists() and not same_content(source, target):
                backup = free_backup_path(target, clock())
                logger.info("Backing up existing %s to %s", target.name, backup)
                shutil.copy2(target, backup)

            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(source, target)
            os.chmod(target, mode)
        except OSError as e:
            return ActionResult.failure(
                error=f"Copy of {source} to {target} failed: {e}",
                metadata={"backup": str(backup) if backup else None},
            )

        return ActionResult.success(
            f"{source.name} installed to {target}",
            metadata={"backup": str(backup) if backup else None},
        )

    return Step(
        name=f"file:{target.name}",
        check=check,
        act=act,
        verify=lambda: same_content(source, target),
        fatal=fatal,
        kind=StepKind.FILE,
        label=target.name,
        requires=requires,
    )
