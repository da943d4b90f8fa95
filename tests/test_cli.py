"""
Tests for the CLI — options, exit codes, and final messages.

``run_install`` is replaced with a stub so no test touches the host.
"""

import json
import logging
from pathlib import Path

import pytest
from click.testing import CliRunner

from dotstrap.core.engine.pipeline import PipelineResult
from dotstrap.core.models.profile import Profile
from dotstrap.core.observability.logging_config import VERBOSE
from dotstrap.core.models.step import FailureKind, Outcome, StepResult
from dotstrap.core.use_cases import install
from dotstrap.core.use_cases.install import InstallResult
from dotstrap.main import cli


@pytest.fixture(autouse=True)
def restore_logging():
    """The CLI reconfigures the root logger; undo it after each test."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def _ok_result() -> InstallResult:
    return InstallResult(
        pipeline=PipelineResult(
            results=[
                StepResult(name="packages", outcome=Outcome.SKIPPED),
                StepResult(name="file:.zshrc", outcome=Outcome.PERFORMED),
            ]
        ),
        profile=Profile(),
        root=Path("/repo"),
    )


def _failed_result() -> InstallResult:
    return InstallResult(
        pipeline=PipelineResult(
            results=[
                StepResult(
                    name="build:meow",
                    outcome=Outcome.FAILED_FATAL,
                    failure=FailureKind.EXTERNAL_COMMAND,
                    message="Build of meow failed",
                    output="error[E0308]: mismatched types",
                )
            ],
            aborted_at="build:meow",
        ),
        profile=Profile(),
        root=Path("/repo"),
    )


def stub_install(monkeypatch: pytest.MonkeyPatch, result: InstallResult) -> list[dict]:
    calls: list[dict] = []

    def fake(config_path=None, **kwargs):
        calls.append({"config_path": config_path})
        return result

    monkeypatch.setattr(install, "run_install", fake)
    return calls


class TestCLIGlobal:
    def test_help(self):
        result = CliRunner().invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "--config" in result.output
        assert "--json" in result.output

    def test_version(self):
        result = CliRunner().invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output


class TestInstallCommand:
    def test_success_exits_zero(self, monkeypatch: pytest.MonkeyPatch):
        stub_install(monkeypatch, _ok_result())
        result = CliRunner().invoke(cli, [])
        assert result.exit_code == 0
        assert "Installation completed successfully!" in result.output
        assert "source ~/.zshrc" in result.output
        assert "chsh -s /bin/zsh" in result.output

    def test_fatal_failure_exits_one(self, monkeypatch: pytest.MonkeyPatch):
        stub_install(monkeypatch, _failed_result())
        result = CliRunner().invoke(cli, [])
        assert result.exit_code == 1
        assert "aborted at build:meow" in result.output
        assert "mismatched types" in result.output

    def test_config_error_exits_one(self, monkeypatch: pytest.MonkeyPatch):
        stub_install(monkeypatch, InstallResult(error="Config file not found: x.yml"))
        result = CliRunner().invoke(cli, [])
        assert result.exit_code == 1
        assert "Config file not found" in result.output

    def test_config_path_is_passed(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
        calls = stub_install(monkeypatch, _ok_result())
        config = tmp_path / "dotstrap.yml"
        CliRunner().invoke(cli, ["--config", str(config)])
        assert calls == [{"config_path": config}]

    def test_json_output(self, monkeypatch: pytest.MonkeyPatch):
        stub_install(monkeypatch, _ok_result())
        result = CliRunner().invoke(cli, ["--json"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["pipeline"]["status"] == "ok"
        assert [s["name"] for s in data["pipeline"]["steps"]] == ["packages", "file:.zshrc"]

    def test_json_output_failure_exit_code(self, monkeypatch: pytest.MonkeyPatch):
        stub_install(monkeypatch, _failed_result())
        result = CliRunner().invoke(cli, ["--json"])
        assert result.exit_code == 1
        assert json.loads(result.stdout)["pipeline"]["aborted_at"] == "build:meow"

    def test_quiet_hides_info(self, monkeypatch: pytest.MonkeyPatch):
        stub_install(monkeypatch, _ok_result())
        result = CliRunner().invoke(cli, ["--quiet"])
        assert result.exit_code == 0
        assert "Restart your terminal" not in result.output

    def test_unexpected_error_exits_one(self, monkeypatch: pytest.MonkeyPatch):
        def boom(**kwargs):
            raise RuntimeError("unexpected")

        monkeypatch.setattr(install, "run_install", boom)
        result = CliRunner().invoke(cli, [])
        assert result.exit_code == 1
        assert "unexpected error" in result.output

    def test_verbose_shows_commands_not_debug(self, monkeypatch: pytest.MonkeyPatch):
        stub_install(monkeypatch, _ok_result())
        CliRunner().invoke(cli, ["--verbose"])
        root = logging.getLogger()
        assert root.level == VERBOSE
        assert not root.isEnabledFor(logging.DEBUG)

    def test_debug_enables_debug(self, monkeypatch: pytest.MonkeyPatch):
        stub_install(monkeypatch, _ok_result())
        CliRunner().invoke(cli, ["--debug"])
        assert logging.getLogger().level == logging.DEBUG

    def test_log_level_from_env(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("DOTSTRAP_LOG_LEVEL", "ERROR")
        stub_install(monkeypatch, _ok_result())
        result = CliRunner().invoke(cli, [])
        assert "Installation completed successfully!" not in result.output

    def test_log_file(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
        log_file = tmp_path / "dotstrap.log"
        monkeypatch.setenv("DOTSTRAP_LOG_FILE", str(log_file))
        stub_install(monkeypatch, _ok_result())
        CliRunner().invoke(cli, [])
        assert "Installation completed successfully!" in log_file.read_text()
