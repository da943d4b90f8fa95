"""
Package steps — system packages, tools on PATH, and full upgrades.

``package_step`` is the set-difference installer:

    missing = desired − installed

and installs the whole missing set with ONE package-manager call, so
the user sees a single prompt and the manager runs a single
transaction.
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable

from dotstrap.adapters.base import CommandResult
from dotstrap.adapters.packages.manager import PackageManager
from dotstrap.adapters.shell.probe import CommandProbe
from dotstrap.core.models.action import ActionResult
from dotstrap.core.models.step import Step, StepKind, StepState

logger = logging.getLogger(__name__)

IsInstalled = Callable[[str], bool]
Installer = Callable[[set[str]], CommandResult]


def missing_packages(desired: Iterable[str], is_installed: IsInstalled) -> set[str]:
    """Desired package names that are not currently installed."""
    return {name for name in set(desired) if not is_installed(name)}


def package_step(
    name: str,
    desired: Iterable[str],
    is_installed: IsInstalled,
    install: Installer,
    *,
    fatal: bool = True,
    label: str = "",
    requires: tuple[str, ...] = (),
) -> Step:
    """Install whichever of ``desired`` is missing.

    Args:
        name: Step name.
        desired: Package names; must not be empty.
        is_installed: Query for a single package.
        install: Batched installer, called once with the missing set.
        fatal: Core toolchain packages are fatal, optional ones not.
    """
    wanted = frozenset(desired)
    if not wanted:
        raise ValueError(f"Package step '{name}' has no packages")

    def check() -> StepState:
        if missing_packages(wanted, is_installed):
            return StepState.MISSING
        return StepState.SATISFIED

    def act() -> ActionResult:
        missing = missing_packages(wanted, is_installed)
        if not missing:
            return ActionResult.success("All packages already installed")
        logger.warning("Missing packages: %s", " ".join(sorted(missing)))
        logger.info("Installing missing packages...")
        result = ActionResult.from_command(
            install(set(missing)),
            output=f"Installed {' '.join(sorted(missing))}",
        )
        result.metadata["missing"] = sorted(missing)
        return result

    def verify() -> bool:
        return not missing_packages(wanted, is_installed)

    return Step(
        name=name,
        check=check,
        act=act,
        verify=verify,
        fatal=fatal,
        kind=StepKind.PACKAGE,
        label=label or "Package dependencies",
        requires=requires,
    )


def tool_step(
    command: str,
    package: str,
    probe: CommandProbe,
    install: Installer,
    *,
    fatal: bool = True,
    requires: tuple[str, ...] = (),
) -> Step:
    """Make sure ``command`` is on PATH, installing ``package`` if not."""

    def check() -> StepState:
        return StepState.SATISFIED if probe.exists(command) else StepState.MISSING

    def act() -> ActionResult:
        return ActionResult.from_command(
            install({package}), output=f"Installed {package}"
        )

    return Step(
        name=f"tool:{command}",
        check=check,
        act=act,
        verify=lambda: probe.exists(command),
        fatal=fatal,
        kind=StepKind.PACKAGE,
        label=command,
        requires=requires,
    )


def upgrade_step(manager: PackageManager, *, fatal: bool = False) -> Step:
    """Full-system upgrade, skipped when nothing is pending.

    No verify phase: some managers keep reporting held-back packages
    after a successful upgrade.
    """

    def check() -> StepState:
        pending = manager.pending_upgrades()
        if pending is not None and not pending:
            return StepState.SATISFIED
        return StepState.MISSING

    def act() -> ActionResult:
        logger.info("Updating system packages...")
        return ActionResult.from_command(manager.upgrade(), output="System updated")

    return Step(
        name="system-upgrade",
        check=check,
        act=act,
        fatal=fatal,
        kind=StepKind.PACKAGE,
        label="System packages",
    )
