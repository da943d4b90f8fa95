"""
Install use case — provision the host from a profile.

This is the top-level orchestrator: it loads the profile, builds the
step list in dependency order, runs the pipeline, and returns the
result. The CLI is a thin wrapper over ``run_install``.

Default order (each step's prerequisites come first):

    system → privilege → system-upgrade → tool:zsh → framework:oh-my-zsh
    → plugin:* → packages → optional-packages → tool:cargo
    → submodules → build:meow → file:.zshrc
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from dotstrap.adapters.base import CommandRunner
from dotstrap.adapters.packages.manager import PackageManager
from dotstrap.adapters.shell.command import SubprocessRunner
from dotstrap.adapters.shell.probe import CommandProbe
from dotstrap.adapters.vcs.git import GitAdapter
from dotstrap.core.config.loader import ConfigError, find_profile_file, load_profile, repo_root
from dotstrap.core.context import HostContext
from dotstrap.core.engine.pipeline import PipelineResult, run_pipeline, validate_order
from dotstrap.core.models.build import BuildTarget
from dotstrap.core.models.profile import Profile
from dotstrap.core.models.step import Step
from dotstrap.core.steps import (
    build_install_step,
    clone_step,
    file_install_step,
    framework_step,
    package_step,
    privilege_step,
    submodule_step,
    system_check_step,
    tool_step,
    upgrade_step,
)

logger = logging.getLogger(__name__)

SUBMODULE_HINT = "git submodule update --init --recursive"


@dataclass
class InstallResult:
    """Result of a provisioning run."""

    pipeline: PipelineResult | None = None
    profile: Profile | None = None
    root: Path | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.pipeline is not None and self.pipeline.ok

    def to_dict(self) -> dict:
        result: dict = {}
        if self.error:
            result["error"] = self.error
            return result

        result["profile"] = self.profile.name if self.profile else ""
        result["root"] = str(self.root)
        if self.pipeline:
            result["pipeline"] = self.pipeline.to_dict()
        return result


def build_steps(
    profile: Profile,
    context: HostContext,
    runner: CommandRunner,
    root: Path,
    probe: CommandProbe | None = None,
) -> list[Step]:
    """Turn a profile into an ordered step list.

    Args:
        profile: What to install.
        context: Host HOME / cwd / PATH.
        runner: Executes every external command.
        root: Repository root; relative profile paths resolve here.
        probe: PATH probe (default: one bound to ``context.path``).
    """
    probe = probe or CommandProbe(context.path)
    manager = PackageManager(
        profile.package_manager, runner, context, assume_yes=profile.assume_yes
    )
    git = GitAdapter(runner, context)

    steps: list[Step] = [system_check_step(manager, probe, profile.platform_marker)]

    if manager.spec.needs_sudo or profile.builds:
        steps.append(privilege_step(context, probe))

    if profile.system_upgrade:
        steps.append(upgrade_step(manager))

    # ── Shell, framework, plugins ───────────────────────────────
    shell_requires: tuple[str, ...] = ()
    if profile.shell:
        shell = tool_step(profile.shell.command, profile.shell.provider, probe, manager.install)
        steps.append(shell)
        shell_requires = (shell.name,)

    plugin_requires: tuple[str, ...] = ()
    if profile.framework:
        framework = framework_step(
            profile.framework, context, runner, requires=shell_requires
        )
        steps.append(framework)
        plugin_requires = (framework.name,)

    plugins_dir = context.expand(profile.plugins_dir, root)
    for plugin in profile.plugins:
        steps.append(
            clone_step(
                plugin.name,
                plugin.repo,
                plugins_dir / plugin.name,
                git,
                fatal=plugin.fatal,
                requires=plugin_requires,
            )
        )

    # ── Packages and toolchains ─────────────────────────────────
    if profile.packages:
        steps.append(
            package_step("packages", profile.packages, manager.is_installed, manager.install)
        )
    if profile.optional_packages:
        steps.append(
            package_step(
                "optional-packages",
                profile.optional_packages,
                manager.is_installed,
                manager.install,
                fatal=False,
                label="Optional packages",
            )
        )
    for tool in profile.toolchains:
        steps.append(tool_step(tool.command, tool.provider, probe, manager.install))

    # ── Nested sources and builds ───────────────────────────────
    if profile.submodules:
        steps.append(submodule_step(root, git))

    names = {s.name for s in steps}
    for build in profile.builds:
        wanted = ["submodules", *(f"tool:{cmd}" for cmd in build.build_command[:1])]
        requires = tuple(n for n in wanted if n in names)
        target = BuildTarget(
            source_dir=context.expand(build.source_dir, root),
            manifest=build.manifest,
            output=build.output_rel,
            install_path=context.expand(build.install_target, root),
        )
        steps.append(
            build_install_step(
                build.name,
                target,
                build.build_command,
                runner,
                probe,
                context,
                mode=build.mode,
                fatal=build.fatal,
                submodule_hint=SUBMODULE_HINT,
                requires=requires,
            )
        )

    # ── Configuration files ─────────────────────────────────────
    for cfg in profile.config_files:
        steps.append(
            file_install_step(
                context.expand(cfg.source, root),
                context.expand(cfg.target, root),
                mode=cfg.mode,
            )
        )

    return steps


def run_install(
    config_path: Path | None = None,
    context: HostContext | None = None,
    runner: CommandRunner | None = None,
    probe: CommandProbe | None = None,
) -> InstallResult:
    """Provision the host.

    Args:
        config_path: Explicit dotstrap.yml. None searches upward from
            the working directory, then falls back to defaults.
        context: Host snapshot (default: the current process).
        runner: Command runner (default: real subprocesses).
        probe: PATH probe override.

    Returns:
        InstallResult; ``error`` is set when the profile could not be
        loaded and no step ran.
    """
    result = InstallResult()
    context = context or HostContext.from_environ()
    runner = runner or SubprocessRunner()

    # ── Load profile ─────────────────────────────────────────────
    cwd = Path(context.cwd)
    if config_path is None:
        config_path = find_profile_file(cwd)
    try:
        profile = load_profile(config_path)
    except ConfigError as e:
        result.error = str(e)
        return result

    result.profile = profile
    result.root = repo_root(config_path, cwd)

    try:
        steps = build_steps(profile, context, runner, result.root, probe=probe)
    except ValueError as e:
        result.error = f"Invalid profile: {e}"
        return result
    errors = validate_order(steps)
    if errors:
        result.error = "Invalid profile: step order:\n" + "\n".join(errors)
        return result

    logger.info("Starting %s installation...", profile.name)
    result.pipeline = run_pipeline(steps)
    return result
