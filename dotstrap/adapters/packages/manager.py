"""
Package manager adapter — query, install, and upgrade system packages.

One table describes every supported manager; ``PackageManager`` turns
it into commands and runs them through a ``CommandRunner``:

    pacman → pacman -Q PKG          / pacman -S --needed PKGS
    apt    → dpkg-query -W PKG      / apt-get install PKGS
    dnf    → rpm -q PKG             / dnf install PKGS
    zypper → rpm -q PKG             / zypper install PKGS
    apk    → apk info -e PKG        / apk add PKGS
    brew   → brew ls --versions PKG / brew install PKGS
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable

from dotstrap.adapters.base import CommandResult, CommandRunner
from dotstrap.core.context import HostContext

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ManagerSpec:
    """Command shapes for one package manager."""

    name: str
    query: tuple[str, ...]
    install: tuple[str, ...]
    upgrade: tuple[str, ...]
    confirm_flags: tuple[str, ...] = ()
    # Query that refreshes its own package metadata before listing
    # pending upgrades, and the exit codes meaning it ran
    pending: tuple[str, ...] | None = None
    pending_ok_codes: tuple[int, ...] = (0,)
    installed_marker: str | None = None
    needs_sudo: bool = True


MANAGERS: dict[str, ManagerSpec] = {
    "pacman": ManagerSpec(
        name="pacman",
        query=("pacman", "-Q"),
        install=("pacman", "-S", "--needed"),
        upgrade=("pacman", "-Syu", "--noconfirm"),
        confirm_flags=("--noconfirm",),
        # checkupdates syncs a private copy of the database; exit 2 = none
        pending=("checkupdates",),
        pending_ok_codes=(0, 2),
    ),
    "apt": ManagerSpec(
        name="apt",
        query=("dpkg-query", "-W", "-f=${Status}"),
        install=("apt-get", "install"),
        upgrade=("apt-get", "dist-upgrade", "-y"),
        confirm_flags=("-y",),
        installed_marker="install ok installed",
    ),
    "dnf": ManagerSpec(
        name="dnf",
        query=("rpm", "-q"),
        install=("dnf", "install"),
        upgrade=("dnf", "upgrade", "-y"),
        confirm_flags=("-y",),
        # exit 100 = updates available, 1 = error
        pending=("dnf", "check-update", "-q"),
        pending_ok_codes=(0, 100),
    ),
    "zypper": ManagerSpec(
        name="zypper",
        query=("rpm", "-q"),
        install=("zypper", "install"),
        upgrade=("zypper", "update", "-y"),
        confirm_flags=("-y",),
    ),
    "apk": ManagerSpec(
        name="apk",
        query=("apk", "info", "-e"),
        install=("apk", "add"),
        upgrade=("apk", "upgrade"),
    ),
    "brew": ManagerSpec(
        name="brew",
        query=("brew", "ls", "--versions"),
        install=("brew", "install"),
        upgrade=("brew", "upgrade"),
        needs_sudo=False,
    ),
}

class PackageManager:
    """System package manager bound to a runner and a host."""

    def __init__(
        self,
        name: str,
        runner: CommandRunner,
        context: HostContext,
        *,
        assume_yes: bool = False,
    ):
        if name not in MANAGERS:
            raise ValueError(
                f"Unsupported package manager '{name}'. "
                f"Valid: {', '.join(sorted(MANAGERS))}"
            )
        self.spec = MANAGERS[name]
        self._runner = runner
        self._context = context
        self._assume_yes = assume_yes

    @property
    def name(self) -> str:
        return self.spec.name

    @property
    def binary(self) -> str:
        """Executable that must be on PATH for this manager to work."""
        return self.spec.install[0]

    @property
    def needs_sudo(self) -> bool:
        return self.spec.needs_sudo and not self._context.is_root

    # ── Queries ─────────────────────────────────────────────────

    def is_installed(self, package: str) -> bool:
        """Check if a single package is installed."""
        result = self._runner.run(
            [*self.spec.query, package],
            env=self._context.command_env(),
        )
        if self.spec.installed_marker is not None:
            return self.spec.installed_marker in result.stdout
        return result.ok

    def pending_upgrades(self) -> list[str] | None:
        """Packages with an upgrade available.

        Returns None when this manager has no query for it, or the
        query itself failed; callers treat that as "upgrade needed".
        """
        if self.spec.pending is None:
            return None
        result = self._runner.run(
            list(self.spec.pending),
            env=self._context.command_env(),
        )
        if result.returncode not in self.spec.pending_ok_codes:
            logger.debug("Pending-upgrade query failed: %s", result.describe())
            return None
        return [line.strip() for line in result.stdout.splitlines() if line.strip()]

    # ── Mutations ───────────────────────────────────────────────

    def install(self, packages: Iterable[str]) -> CommandResult:
        """Install ``packages`` with ONE manager invocation."""
        names = sorted(set(packages))
        argv = list(self.spec.install)
        if self._assume_yes:
            argv += list(self.spec.confirm_flags)
        argv += names
        logger.debug("Installing with %s: %s", self.name, " ".join(names))
        return self._runner.run(
            argv,
            env=self._context.command_env(),
            sudo=self.needs_sudo,
            interactive=not self._assume_yes,
        )

    def upgrade(self) -> CommandResult:
        """Full-system upgrade."""
        return self._runner.run(
            list(self.spec.upgrade),
            env=self._context.command_env(),
            sudo=self.needs_sudo,
            interactive=True,
        )

    def __repr__(self) -> str:
        return f"<PackageManager name={self.name!r}>"
