"""
Tests for the install use case — step assembly and end-to-end runs
against a mock runner and a tmp_path host.
"""

import shutil
import textwrap
from pathlib import Path

import pytest

from dotstrap.adapters.mock import MockRunner
from dotstrap.adapters.shell.probe import CommandProbe
from dotstrap.core.context import HostContext
from dotstrap.core.models.action import ActionResult
from dotstrap.core.models.profile import Profile
from dotstrap.core.models.step import Outcome, Step, StepState
from dotstrap.core.use_cases import install
from dotstrap.core.use_cases.install import build_steps, run_install

# ── Step assembly ────────────────────────────────────────────────────


class TestBuildSteps:
    def test_default_order(self, context: HostContext, runner: MockRunner, repo_dir: Path):
        steps = build_steps(Profile(), context, runner, repo_dir)
        assert [s.name for s in steps] == [
            "system",
            "privilege",
            "system-upgrade",
            "tool:zsh",
            "framework:oh-my-zsh",
            "plugin:zsh-syntax-highlighting",
            "plugin:zsh-autosuggestions",
            "packages",
            "tool:cargo",
            "submodules",
            "build:meow",
            "file:.zshrc",
        ]

    def test_build_requires_toolchain_and_submodules(
        self, context: HostContext, runner: MockRunner, repo_dir: Path
    ):
        steps = {s.name: s for s in build_steps(Profile(), context, runner, repo_dir)}
        assert steps["build:meow"].requires == ("submodules", "tool:cargo")
        assert steps["framework:oh-my-zsh"].requires == ("tool:zsh",)
        assert steps["plugin:zsh-autosuggestions"].requires == ("framework:oh-my-zsh",)

    def test_optional_packages_step(self, context: HostContext, runner: MockRunner, repo_dir: Path):
        profile = Profile(optional_packages=["bat"])
        steps = {s.name: s for s in build_steps(profile, context, runner, repo_dir)}
        assert steps["optional-packages"].fatal is False
        assert steps["packages"].fatal is True

    def test_brew_without_builds_needs_no_privilege(
        self, context: HostContext, runner: MockRunner, repo_dir: Path
    ):
        profile = Profile(package_manager="brew", builds=[])
        names = [s.name for s in build_steps(profile, context, runner, repo_dir)]
        assert "privilege" not in names

    def test_minimal_profile(self, context: HostContext, runner: MockRunner, repo_dir: Path):
        profile = Profile(
            system_upgrade=False,
            shell=None,
            framework=None,
            plugins=[],
            toolchains=[],
            submodules=False,
            builds=[],
            config_files=[],
        )
        names = [s.name for s in build_steps(profile, context, runner, repo_dir)]
        assert names == ["system", "privilege", "packages"]

    def test_paths_resolve_against_root_and_home(
        self, context: HostContext, runner: MockRunner, repo_dir: Path, home_dir: Path
    ):
        steps = build_steps(Profile(), context, runner, repo_dir)
        assert steps[-1].label == ".zshrc"
        # ~/.zshrc must land in the context's home, never the real one
        (repo_dir / ".zshrc").write_text("x")
        steps[-1].act()
        assert (home_dir / ".zshrc").read_text() == "x"


# ── End-to-end ───────────────────────────────────────────────────────


@pytest.fixture
def host(
    repo_dir: Path, home_dir: Path, bin_dir: Path, runner: MockRunner, make_executable
) -> Path:
    """A dotfiles checkout whose tools are all present and packages installed."""
    for tool in ("pacman", "sudo", "zsh", "cargo", "git"):
        make_executable(tool)

    (home_dir / ".oh-my-zsh").mkdir()
    (repo_dir / ".gitmodules").write_text('[submodule "thirdparty/meow"]\n')
    meow = repo_dir / "thirdparty" / "meow"
    meow.mkdir(parents=True)
    (meow / "Cargo.toml").write_text('[package]\nname = "meow"\n')
    (repo_dir / ".zshrc").write_text("export EDITOR=micro\n")

    config = repo_dir / "dotstrap.yml"
    config.write_text(textwrap.dedent(f"""\
        name: test-dotfiles
        platform_marker: null
        builds:
          - name: meow
            source_dir: thirdparty/meow
            install_path: {bin_dir / "meow"}
    """))

    def build(argv: list[str]) -> None:
        out = meow / "target" / "release" / "meow"
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_bytes(b"meow-binary")

    def install(argv: list[str]) -> None:
        dest = Path(argv[-1])
        dest.write_bytes(Path(argv[-2]).read_bytes())
        dest.chmod(0o755)

    runner.set_response(["checkupdates"], returncode=2)
    runner.set_response(["git", "submodule", "status"], stdout=" abc123 thirdparty/meow\n")
    runner.on(["git", "clone"], lambda argv: Path(argv[-1]).mkdir(parents=True))
    runner.on(["cargo", "build"], build)
    runner.on(["install"], install)
    return config


class TestRunInstall:
    def test_fresh_then_idempotent(
        self, host: Path, context: HostContext, runner: MockRunner, probe: CommandProbe,
        home_dir: Path,
    ):
        first = run_install(host, context=context, runner=runner, probe=probe)

        assert first.ok, first.to_dict()
        outcomes = dict(first.pipeline.outcomes())
        assert outcomes["plugin:zsh-syntax-highlighting"] is Outcome.PERFORMED
        assert outcomes["build:meow"] is Outcome.PERFORMED
        assert outcomes["file:.zshrc"] is Outcome.PERFORMED
        assert outcomes["packages"] is Outcome.SKIPPED
        assert (home_dir / ".zshrc").read_text() == "export EDITOR=micro\n"

        second = run_install(host, context=context, runner=runner, probe=probe)

        assert second.ok
        assert second.pipeline.performed == 0
        assert second.pipeline.skipped == second.pipeline.total
        assert len(runner.calls_matching("cargo")) == 1
        assert len(runner.calls_matching("git", "clone")) == 2
        assert len(runner.calls_matching("install")) == 1

    def test_missing_packages_installed_in_one_call(
        self, host: Path, context: HostContext, runner: MockRunner, probe: CommandProbe
    ):
        installed = {"ripgrep", "htop", "micro", "git"}
        runner.set_failure(["pacman", "-Q"])
        for name in installed:
            runner.set_response(["pacman", "-Q", name])
        runner.on(
            ["pacman", "-S"],
            lambda argv: [runner.set_response(["pacman", "-Q", n]) for n in argv[3:]],
        )

        result = run_install(host, context=context, runner=runner, probe=probe)

        assert result.ok, result.to_dict()
        installs = runner.calls_matching("pacman", "-S")
        assert [c.argv for c in installs] == [["pacman", "-S", "--needed", "fzf"]]
        assert installs[0].sudo
        assert result.pipeline.get("packages").metadata["missing"] == ["fzf"]

    def test_fatal_step_stops_later_steps(
        self, host: Path, context: HostContext, runner: MockRunner, probe: CommandProbe,
        repo_dir: Path, home_dir: Path,
    ):
        shutil.rmtree(repo_dir / "thirdparty" / "meow")

        result = run_install(host, context=context, runner=runner, probe=probe)

        assert not result.ok
        assert result.pipeline.aborted_at == "build:meow"
        assert result.pipeline.get("file:.zshrc") is None
        assert runner.calls_matching("cargo") == []
        assert not (home_dir / ".zshrc").exists()

    def test_missing_package_manager_aborts_first(
        self, host: Path, context: HostContext, runner: MockRunner, probe: CommandProbe,
        bin_dir: Path,
    ):
        (bin_dir / "pacman").unlink()
        result = run_install(host, context=context, runner=runner, probe=probe)
        assert result.pipeline.outcomes() == [("system", Outcome.FAILED_FATAL)]
        assert runner.call_count == 0

    def test_config_error(self, context: HostContext, runner: MockRunner, repo_dir: Path):
        bad = repo_dir / "dotstrap.yml"
        bad.write_text("package_manager: emerge\n")
        result = run_install(bad, context=context, runner=runner)
        assert not result.ok
        assert "Invalid profile configuration" in result.error
        assert result.pipeline is None
        assert runner.call_count == 0

    def test_invalid_step_order_is_a_profile_error(
        self, host: Path, context: HostContext, runner: MockRunner, probe: CommandProbe,
        monkeypatch: pytest.MonkeyPatch,
    ):
        looping = Step(
            name="a", check=lambda: StepState.MISSING, act=ActionResult, requires=("b",)
        )
        monkeypatch.setattr(install, "build_steps", lambda *args, **kwargs: [looping])
        result = run_install(host, context=context, runner=runner, probe=probe)
        assert result.error.startswith("Invalid profile")
        assert "requires unknown step 'b'" in result.error
        assert result.pipeline is None

    def test_value_error_from_a_step_propagates(
        self, host: Path, context: HostContext, runner: MockRunner, probe: CommandProbe,
        monkeypatch: pytest.MonkeyPatch,
    ):
        def act():
            raise ValueError("embedded null byte")

        broken = Step(name="a", check=lambda: StepState.MISSING, act=act)
        monkeypatch.setattr(install, "build_steps", lambda *args, **kwargs: [broken])
        with pytest.raises(ValueError, match="embedded null byte"):
            run_install(host, context=context, runner=runner, probe=probe)

    def test_profile_found_from_cwd(
        self, host: Path, context: HostContext, runner: MockRunner, probe: CommandProbe
    ):
        result = run_install(context=context, runner=runner, probe=probe)
        assert result.profile.name == "test-dotfiles"
        assert result.root == host.parent.resolve()

    def test_to_dict(self, host: Path, context: HostContext, runner: MockRunner, probe: CommandProbe):
        d = run_install(host, context=context, runner=runner, probe=probe).to_dict()
        assert d["profile"] == "test-dotfiles"
        assert d["pipeline"]["status"] == "ok"
        assert d["pipeline"]["steps"][0]["name"] == "system"
