"""
Build-and-install step — compile a binary from a nested source tree.

Preconditions are checked before anything runs, and produce messages
distinct from a compile failure:

    source_dir missing  → "did you clone with submodules?"
    manifest missing    → the tree is there but is not a build tree
    build tool missing  → the toolchain step did not run

Then the build runs in ``source_dir``, and the produced binary is
installed with ``install -m MODE``, through sudo when the target
directory is not writable.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from dotstrap.adapters.base import CommandRunner, format_argv
from dotstrap.adapters.shell.probe import CommandProbe
from dotstrap.core.context import HostContext
from dotstrap.core.models.action import ActionResult
from dotstrap.core.models.build import BuildTarget
from dotstrap.core.models.step import PreconditionError, Step, StepKind, StepState

logger = logging.getLogger(__name__)


def _same_bytes(a: Path, b: Path) -> bool:
    try:
        return a.read_bytes() == b.read_bytes()
    except OSError:
        return False


def _needs_sudo(install_path: Path, context: HostContext) -> bool:
    if context.is_root:
        return False
    directory = install_path.parent
    return not (directory.is_dir() and os.access(directory, os.W_OK))


def build_install_step(
    name: str,
    target: BuildTarget,
    build_command: list[str],
    runner: CommandRunner,
    probe: CommandProbe,
    context: HostContext,
    *,
    mode: int = 0o755,
    fatal: bool = True,
    submodule_hint: str = "",
    requires: tuple[str, ...] = (),
) -> Step:
    """Build ``target`` with ``build_command`` and install the result.

    Verification asks the probe for the binary name rather than
    checking ``install_path``: the install directory may not be on
    PATH in this session, so a miss only warns.
    """
    if not build_command:
        raise ValueError(f"Build step '{name}' has no build command")

    def check() -> StepState:
        installed = target.install_path
        if not installed.is_file():
            return StepState.MISSING
        if target.output_path.is_file() and not _same_bytes(target.output_path, installed):
            return StepState.MISSING
        return StepState.SATISFIED

    def preconditions() -> None:
        if not target.source_dir.is_dir():
            hints = ["Make sure you cloned the repo with submodules:"]
            if submodule_hint:
                hints.append(submodule_hint)
            raise PreconditionError(
                f"{target.source_dir} directory not found", hints=hints
            )
        if not target.manifest_path.is_file():
            raise PreconditionError(
                f"{target.manifest} not found in {target.source_dir}"
            )
        if not probe.exists(build_command[0]):
            raise PreconditionError(
                f"Build tool '{build_command[0]}' not found on PATH",
                hints=[f"Install the toolchain that provides {build_command[0]} first."],
            )

    def act() -> ActionResult:
        preconditions()

        logger.info("Building %s from source...", name)
        built = runner.run(
            build_command,
            cwd=str(target.source_dir),
            env=context.command_env(),
        )
        if not built.ok:
            return ActionResult.failure(
                error=f"Build of {name} failed\n{built.describe()}",
                output=built.output_tail(),
                duration_ms=built.duration_ms,
                metadata={"command": built.command, "return_code": built.returncode},
            )

        if not target.output_path.is_file():
            return ActionResult.failure(
                error=(
                    f"Build of {name} succeeded but {target.output} was not produced "
                    f"({format_argv(build_command)})"
                ),
            )

        logger.info("Installing %s binary...", name)
        installed = runner.run(
            ["install", "-m", f"{mode:o}", str(target.output_path), str(target.install_path)],
            env=context.command_env(),
            sudo=_needs_sudo(target.install_path, context),
        )
        result = ActionResult.from_command(
            installed, output=f"{name} installed to {target.install_path}"
        )
        result.duration_ms += built.duration_ms
        return result

    return Step(
        name=f"build:{name}",
        check=check,
        act=act,
        verify=lambda: probe.exists(target.binary_name),
        fatal=fatal,
        strict_verify=False,
        kind=StepKind.BUILD,
        label=name,
        requires=requires,
    )
