"""
Requirement steps — fail fast when the host cannot be provisioned.

These steps never change anything. ``check()`` answers the question;
``act()`` raises ``PreconditionError`` with a message telling the
operator what is wrong.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Sequence

from dotstrap.adapters.packages.manager import PackageManager
from dotstrap.adapters.shell.probe import CommandProbe
from dotstrap.core.context import HostContext
from dotstrap.core.models.action import ActionResult
from dotstrap.core.models.step import PreconditionError, Step, StepKind, StepState


def requirement_step(
    name: str,
    predicate: Callable[[], bool],
    message: str | Callable[[], str],
    *,
    label: str = "",
    hints: Sequence[str] = (),
) -> Step:
    """A step that passes when ``predicate()`` holds and aborts otherwise."""

    def check() -> StepState:
        return StepState.SATISFIED if predicate() else StepState.MISSING

    def act() -> ActionResult:
        text = message() if callable(message) else message
        raise PreconditionError(text, hints=hints)

    return Step(
        name=name,
        check=check,
        act=act,
        fatal=True,
        kind=StepKind.PROBE,
        label=label or name,
    )


def system_check_step(
    manager: PackageManager,
    probe: CommandProbe,
    platform_marker: str | None = None,
) -> Step:
    """The host runs the expected platform and has its package manager."""

    def marker_ok() -> bool:
        return platform_marker is None or Path(platform_marker).is_file()

    def predicate() -> bool:
        return marker_ok() and probe.exists(manager.binary)

    def message() -> str:
        if not marker_ok():
            return f"This profile targets hosts with {platform_marker}; it was not found"
        return f"{manager.binary} not found. Is {manager.name} the system package manager?"

    return requirement_step(
        "system",
        predicate,
        message,
        label="System requirements",
    )


def privilege_step(context: HostContext, probe: CommandProbe) -> Step:
    """Elevated privilege is reachable: running as root, or sudo exists.

    Probed before any install so a missing sudo aborts the run
    instead of failing halfway through.
    """
    return requirement_step(
        "privilege",
        lambda: context.is_root or probe.exists("sudo"),
        "sudo not found and not running as root",
        label="Elevated privilege",
        hints=["Install sudo, or re-run as root."],
    )
