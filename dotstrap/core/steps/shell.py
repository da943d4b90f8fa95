"""
Shell framework step — run a fetched installer once.

The framework's home directory is the marker: present means
installed. The installer is fetched over the network and executed
with HOME pinned to the host context.
"""

from __future__ import annotations

import shlex

from dotstrap.adapters.base import CommandRunner
from dotstrap.core.context import HostContext
from dotstrap.core.models.action import ActionResult
from dotstrap.core.models.profile import FrameworkSpec
from dotstrap.core.models.step import Step, StepKind, StepState


def installer_command(spec: FrameworkSpec) -> list[str]:
    """``sh -c "$(curl -fsSL URL)" "" ARGS...``"""
    script = f'sh -c "$(curl -fsSL {shlex.quote(spec.installer_url)})" ""'
    if spec.installer_args:
        script += " " + " ".join(shlex.quote(a) for a in spec.installer_args)
    return ["sh", "-c", script]


def framework_step(
    spec: FrameworkSpec,
    context: HostContext,
    runner: CommandRunner,
    *,
    fatal: bool = True,
    requires: tuple[str, ...] = (),
) -> Step:
    marker = context.expand(spec.marker_dir)

    def act() -> ActionResult:
        return ActionResult.from_command(
            runner.run(
                installer_command(spec),
                cwd=context.home,
                env=context.command_env(),
            ),
            output=f"{spec.name} installed to {marker}",
        )

    return Step(
        name=f"framework:{spec.name}",
        check=lambda: StepState.SATISFIED if marker.is_dir() else StepState.MISSING,
        act=act,
        verify=marker.is_dir,
        fatal=fatal,
        kind=StepKind.PROBE,
        label=spec.name,
        requires=requires,
    )
